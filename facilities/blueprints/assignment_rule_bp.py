"""
Hotel Facilities Platform
Assignment rule blueprint.

Endpoints:
    GET    /api/v1/assignment-rules            ?hotelId=
    POST   /api/v1/assignment-rules            (MANAGER+)
    PATCH  /api/v1/assignment-rules/<id>       (MANAGER+)
    DELETE /api/v1/assignment-rules/<id>       (MANAGER+)
"""

from flask import Blueprint, jsonify, request

from facilities.auth import require_role, require_session
from facilities.blueprints import json_body, register_error_handlers
from facilities.services import assignment_engine

assignment_rule_bp = Blueprint("assignment_rules", __name__, url_prefix="/api/v1")
register_error_handlers(assignment_rule_bp)


@assignment_rule_bp.route("/assignment-rules", methods=["GET"])
@require_session
def list_rules():
    rules = assignment_engine.list_rules(request.args.get("hotelId", type=int))
    return jsonify({"rules": [r.to_dict() for r in rules]})


@assignment_rule_bp.route("/assignment-rules", methods=["POST"])
@require_role("MANAGER")
def create_rule():
    rule = assignment_engine.create_rule(json_body())
    return jsonify({"rule": rule.to_dict(), "message": "Assignment rule created successfully"}), 201


@assignment_rule_bp.route("/assignment-rules/<int:rule_id>", methods=["PATCH"])
@require_role("MANAGER")
def update_rule(rule_id):
    rule = assignment_engine.update_rule(rule_id, json_body())
    return jsonify({"rule": rule.to_dict(), "message": "Assignment rule updated successfully"})


@assignment_rule_bp.route("/assignment-rules/<int:rule_id>", methods=["DELETE"])
@require_role("MANAGER")
def delete_rule(rule_id):
    assignment_engine.delete_rule(rule_id)
    return jsonify({"message": "Assignment rule deleted successfully"})

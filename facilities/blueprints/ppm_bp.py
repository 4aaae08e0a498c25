"""
Hotel Facilities Platform
PPM blueprint: preventive-maintenance schedules and work-order generation.

Endpoints:
    GET    /api/v1/ppm-schedules                               {schedules, message} with task counters
    POST   /api/v1/ppm-schedules                               create          (MANAGER+)
    PATCH  /api/v1/ppm-schedules/<id>                          toggle isActive (MANAGER+)
    POST   /api/v1/ppm-schedules/<id>/generate-work-order      work order (+ next task)
"""

import logging

from flask import Blueprint, jsonify, request

from facilities.auth import current_session, require_role, require_session
from facilities.blueprints import json_body, register_error_handlers
from facilities.services import ppm_service

logger = logging.getLogger(__name__)

ppm_bp = Blueprint("ppm", __name__, url_prefix="/api/v1")
register_error_handlers(ppm_bp)


@ppm_bp.route("/ppm-schedules", methods=["GET"])
@require_session
def list_schedules():
    hotel_id = request.args.get("hotelId", type=int)
    schedules = ppm_service.list_schedules(hotel_id)
    return jsonify({
        "schedules": [ppm_service.schedule_summary(s) for s in schedules],
        "message": "PPM schedules fetched successfully",
    })


@ppm_bp.route("/ppm-schedules", methods=["POST"])
@require_role("MANAGER")
def create_schedule():
    schedule = ppm_service.create_schedule(json_body())
    return jsonify(ppm_service.schedule_summary(schedule)), 201


@ppm_bp.route("/ppm-schedules/<int:schedule_id>", methods=["PATCH"])
@require_role("MANAGER")
def toggle_schedule(schedule_id):
    data = json_body()
    schedule = ppm_service.set_active(schedule_id, data.get("isActive"))
    return jsonify(ppm_service.schedule_summary(schedule))


@ppm_bp.route("/ppm-schedules/<int:schedule_id>/generate-work-order", methods=["POST"])
@require_session
def generate_work_order(schedule_id):
    session = current_session()
    work_order = ppm_service.generate_work_order(schedule_id, session.user_id, json_body())
    return jsonify(work_order.to_dict(include_relations=True)), 201

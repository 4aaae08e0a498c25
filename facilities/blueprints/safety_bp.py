"""
Hotel Facilities Platform
Safety & compliance blueprint.

Endpoints:
    GET  /api/v1/safety/certificates    {certificates, message}, derived VALID / EXPIRING / EXPIRED
    POST /api/v1/safety/certificates
    GET  /api/v1/safety/incidents       {incidents, message}
    POST /api/v1/safety/incidents       alerts the managers room
    GET  /api/v1/safety/training        {trainingRecords, message}
"""

from flask import Blueprint, jsonify

from facilities.auth import current_session, require_session
from facilities.blueprints import json_body, register_error_handlers
from facilities.models.base import utcnow
from facilities.services import safety_service

safety_bp = Blueprint("safety", __name__, url_prefix="/api/v1/safety")
register_error_handlers(safety_bp)


@safety_bp.route("/certificates", methods=["GET"])
@require_session
def list_certificates():
    return jsonify({
        "certificates": safety_service.list_certificates(),
        "message": "Certificates fetched successfully",
    })


@safety_bp.route("/certificates", methods=["POST"])
@require_session
def create_certificate():
    certificate = safety_service.create_certificate(json_body())
    status = safety_service.certificate_status(utcnow(), certificate.expiry_date)
    return jsonify(certificate.to_dict(status=status)), 201


@safety_bp.route("/incidents", methods=["GET"])
@require_session
def list_incidents():
    return jsonify({
        "incidents": [i.to_dict() for i in safety_service.list_incidents()],
        "message": "Safety incidents fetched successfully",
    })


@safety_bp.route("/incidents", methods=["POST"])
@require_session
def report_incident():
    incident = safety_service.report_incident(current_session().user_id, json_body())
    return jsonify(incident.to_dict()), 201


@safety_bp.route("/training", methods=["GET"])
@require_session
def list_training():
    return jsonify({
        "trainingRecords": [t.to_dict() for t in safety_service.list_training_records()],
        "message": "Training records fetched successfully",
    })

"""
Hotel Facilities Platform
SLA dashboard blueprint.

Endpoints:
    GET /api/v1/sla-dashboard?priority=&category=&status=    {slaData, metrics}
        status: overdue | compliant | pending
"""

from flask import Blueprint, jsonify, request

from facilities.auth import current_session, require_session
from facilities.blueprints import register_error_handlers
from facilities.core.exceptions import ValidationError
from facilities.services import sla_service

sla_bp = Blueprint("sla", __name__, url_prefix="/api/v1")
register_error_handlers(sla_bp)


@sla_bp.route("/sla-dashboard", methods=["GET"])
@require_session
def sla_dashboard():
    session = current_session()
    if not session.hotel_id:
        raise ValidationError("User not associated with any hotel", details={"hotelId": "required"})
    filters = {key: request.args.get(key) for key in ("priority", "category", "status")}
    return jsonify(sla_service.get_dashboard(session.hotel_id, filters))

"""
Hotel Facilities Platform
Location blueprint.

Endpoints:
    GET /api/v1/locations?search=    active locations of the caller's hotel
"""

from flask import Blueprint, jsonify, request

from facilities.auth import current_session, require_session
from facilities.blueprints import register_error_handlers
from facilities.services import location_service

location_bp = Blueprint("locations", __name__, url_prefix="/api/v1")
register_error_handlers(location_bp)


@location_bp.route("/locations", methods=["GET"])
@require_session
def list_locations():
    locations = location_service.list_locations(
        hotel_id=current_session().hotel_id,
        search=request.args.get("search"),
    )
    return jsonify({"locations": locations, "message": "Locations fetched successfully"})

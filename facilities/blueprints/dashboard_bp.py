"""
Hotel Facilities Platform
Dashboard blueprint: counters and recent activity for the caller's hotel.

Endpoints:
    GET /api/v1/dashboard/stats
    GET /api/v1/dashboard/recent-work-orders
"""

from flask import Blueprint, jsonify

from facilities.auth import current_session, require_session
from facilities.blueprints import register_error_handlers
from facilities.core.exceptions import ValidationError
from facilities.services import dashboard_service, work_order_service

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1/dashboard")
register_error_handlers(dashboard_bp)


def _session_hotel_id():
    session = current_session()
    if not session.hotel_id:
        raise ValidationError("User not associated with any hotel", details={"hotelId": "required"})
    return session.hotel_id


@dashboard_bp.route("/stats", methods=["GET"])
@require_session
def stats():
    return jsonify({
        "stats": dashboard_service.get_stats(_session_hotel_id()),
        "message": "Dashboard stats fetched successfully",
    })


@dashboard_bp.route("/recent-work-orders", methods=["GET"])
@require_session
def recent_work_orders():
    work_orders = work_order_service.recent_for_hotel(_session_hotel_id())
    return jsonify({"workOrders": [wo.to_dict(include_relations=True) for wo in work_orders]})

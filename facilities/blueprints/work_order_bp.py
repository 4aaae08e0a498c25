"""
Hotel Facilities Platform
Work order blueprint.

Endpoints:
    GET    /api/v1/work-orders                      hotel list (STAFF: own only)
    POST   /api/v1/work-orders                      create + auto-assign
    GET    /api/v1/work-orders/my-requests          ?status=&search=
    GET    /api/v1/work-orders/my-recent
    GET    /api/v1/work-orders/my-open-count
    POST   /api/v1/work-orders/bulk                 {action, workOrderIds}   (MANAGER+)
    GET    /api/v1/work-orders/<id>                 detail with history + SLA
    PATCH  /api/v1/work-orders/<id>                 {status?, technicianNotes?}
    DELETE /api/v1/work-orders/<id>                                          (MANAGER+)
    GET    /api/v1/work-orders/<id>/comments        {comments}
    POST   /api/v1/work-orders/<id>/comments        {content, author?, type?}
"""

import logging

from flask import Blueprint, jsonify, request

from facilities.auth import current_session, require_role, require_session
from facilities.blueprints import json_body, register_error_handlers
from facilities.services import work_order_service

logger = logging.getLogger(__name__)

work_order_bp = Blueprint("work_orders", __name__, url_prefix="/api/v1")
register_error_handlers(work_order_bp)


# ── Collection ───────────────────────────────────────────────────────────────

@work_order_bp.route("/work-orders", methods=["GET"])
@require_session
def list_work_orders():
    filters = {
        "status": request.args.get("status"),
        "priority": request.args.get("priority"),
        "assignedTo": request.args.get("assignedTo", type=int),
    }
    work_orders = work_order_service.list_work_orders(current_session(), filters)
    return jsonify({"workOrders": [wo.to_dict(include_relations=True) for wo in work_orders]})


@work_order_bp.route("/work-orders", methods=["POST"])
@require_session
def create_work_order():
    work_order, assignee = work_order_service.create_work_order(current_session(), json_body())
    if assignee:
        message = "Work order created and automatically assigned"
    else:
        message = "Work order created but could not be automatically assigned"
    return jsonify({
        "workOrder": work_order.to_dict(include_relations=True),
        "assignment": {"assigneeId": assignee.id if assignee else None},
        "message": message,
    }), 201


# ── Creator views ────────────────────────────────────────────────────────────

@work_order_bp.route("/work-orders/my-requests", methods=["GET"])
@require_session
def my_requests():
    work_orders = work_order_service.my_requests(
        current_session().user_id,
        status=request.args.get("status"),
        search=request.args.get("search"),
    )
    return jsonify({
        "workOrders": [wo.to_dict(include_relations=True) for wo in work_orders],
        "message": "Work orders fetched successfully",
    })


@work_order_bp.route("/work-orders/my-recent", methods=["GET"])
@require_session
def my_recent():
    work_orders = work_order_service.my_recent(current_session().user_id)
    return jsonify({"workOrders": [wo.to_dict(include_relations=True) for wo in work_orders]})


@work_order_bp.route("/work-orders/my-open-count", methods=["GET"])
@require_session
def my_open_count():
    return jsonify({"count": work_order_service.my_open_count(current_session().user_id)})


# ── Bulk ─────────────────────────────────────────────────────────────────────

@work_order_bp.route("/work-orders/bulk", methods=["POST"])
@require_role("MANAGER")
def bulk_action():
    data = json_body()
    affected = work_order_service.bulk_action(data.get("action"), data.get("workOrderIds"))
    return jsonify({"success": True, "affected": affected})


# ── Single work order ────────────────────────────────────────────────────────

@work_order_bp.route("/work-orders/<int:work_order_id>", methods=["GET"])
@require_session
def get_work_order(work_order_id):
    work_order = work_order_service.get_work_order(work_order_id)
    data = work_order.to_dict(include_relations=True)
    data["statusHistory"] = [h.to_dict() for h in work_order.status_history]
    data["sla"] = work_order.sla.to_dict() if work_order.sla else None
    return jsonify({"workOrder": data})


@work_order_bp.route("/work-orders/<int:work_order_id>", methods=["PATCH"])
@require_session
def update_work_order(work_order_id):
    work_order = work_order_service.update_work_order(
        work_order_id, current_session().user_id, json_body(),
    )
    return jsonify(work_order.to_dict(include_relations=True))


@work_order_bp.route("/work-orders/<int:work_order_id>", methods=["DELETE"])
@require_role("MANAGER")
def delete_work_order(work_order_id):
    work_order_service.delete_work_order(work_order_id)
    return jsonify({"success": True})


# ── Comments ─────────────────────────────────────────────────────────────────

@work_order_bp.route("/work-orders/<int:work_order_id>/comments", methods=["GET"])
@require_session
def list_comments(work_order_id):
    comments = work_order_service.list_comments(work_order_id)
    return jsonify({"comments": [c.to_dict() for c in comments]})


@work_order_bp.route("/work-orders/<int:work_order_id>/comments", methods=["POST"])
@require_session
def add_comment(work_order_id):
    comment = work_order_service.add_comment(
        work_order_id, json_body(), actor=current_session(),
    )
    return jsonify(comment.to_dict()), 201

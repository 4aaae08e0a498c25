"""Work order service layer.

Covers work order CRUD, the per-user query views, bulk actions and the
comment thread.

Rules:
  - The caller's session (user id, role, hotel id) is passed in explicitly;
    nothing here reads flask.g.
  - db.session.commit() happens only in this file (via commit_or_raise).
  - Creating a work order writes the row, its SLA record and the first
    status-history entry in one transaction.
  - A bulk action is committed once for the whole batch.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_

from facilities.core.exceptions import ValidationError
from facilities.models import db
from facilities.models.asset import Asset
from facilities.models.base import utcnow
from facilities.models.hotel import Location, User
from facilities.models.work_order import (
    COMMENT_TYPES,
    OPEN_STATUSES,
    PRIORITIES,
    WORK_ORDER_STATUSES,
    WorkOrder,
    WorkOrderComment,
    WorkOrderSLA,
    WorkOrderStatusHistory,
)
from facilities.services import assignment_engine, realtime, sla_service
from facilities.utils.helpers import commit_or_raise, get_or_raise, optional_text, require_fields, to_id

logger = logging.getLogger(__name__)

BULK_ACTIONS = ("assign", "cancel", "delete")


def _require_hotel(actor) -> int:
    if not actor.hotel_id:
        raise ValidationError("User not associated with any hotel", details={"hotelId": "required"})
    return actor.hotel_id


def _check_status(status) -> str:
    status = str(status).upper()
    if status not in WORK_ORDER_STATUSES:
        raise ValidationError(f"Invalid status: {status}", details={"status": "invalid"})
    return status


# ── CRUD ─────────────────────────────────────────────────────────────────────


def create_work_order(actor, data: dict) -> tuple[WorkOrder, User | None]:
    """Create a work order, auto-assigning it when a rule matches.

    Returns:
        (work_order, assignee) where assignee is None if no rule applied.

    Raises:
        ValidationError: Missing or non-text fields, bad priority or ids,
                         actor without hotel.
        NotFoundError: locationId / assetId do not exist.
    """
    hotel_id = _require_hotel(actor)
    require_fields(data, "title", "description", "category", "priority",
                   text=("title", "description", "category", "priority"))

    priority = data["priority"].upper()
    if priority not in PRIORITIES:
        raise ValidationError(f"Invalid priority: {priority}", details={"priority": "invalid"})
    category = data["category"].strip()

    location_id = data.get("locationId")
    if location_id is not None:
        location_id = get_or_raise(Location, location_id, field="locationId").id
    asset_id = data.get("assetId")
    if asset_id is not None:
        asset_id = get_or_raise(Asset, asset_id, field="assetId").id

    assignee = assignment_engine.find_assignee(category, priority, location_id, hotel_id)
    status = "IN_PROGRESS" if assignee else "LOGGED"
    now = utcnow()

    work_order = WorkOrder(
        title=data["title"].strip(),
        description=data["description"],
        category=category,
        priority=priority,
        status=status,
        hotel_id=hotel_id,
        created_by_id=actor.user_id,
        assigned_to_id=assignee.id if assignee else None,
        location_id=location_id,
        asset_id=asset_id,
    )
    response_minutes, resolution_minutes = assignment_engine.sla_targets(priority)
    work_order.sla = WorkOrderSLA(
        category=category,
        priority=priority,
        expected_response_time=response_minutes,
        expected_resolution_time=resolution_minutes,
        assigned_at=now if assignee else None,
    )
    work_order.status_history.append(
        WorkOrderStatusHistory(status=status, notes="Work order created", user_id=actor.user_id)
    )
    db.session.add(work_order)
    commit_or_raise("create work order", "WorkOrder")
    logger.info(
        "Work order created id=%s hotel=%s priority=%s assignee=%s",
        work_order.id, hotel_id, priority, assignee.id if assignee else None,
    )

    realtime.publish(
        realtime.ROOM_MANAGERS, realtime.EVENT_WORK_ORDER_CREATED,
        work_order.to_dict(include_relations=True),
    )
    return work_order, assignee


def list_work_orders(actor, filters: dict) -> list[WorkOrder]:
    """Hotel-scoped active work orders, newest first. STAFF only see their own."""
    hotel_id = _require_hotel(actor)
    query = WorkOrder.query_for_hotel(hotel_id).filter(WorkOrder.is_active.is_(True))
    if filters.get("status"):
        query = query.filter(WorkOrder.status == filters["status"])
    if filters.get("priority"):
        query = query.filter(WorkOrder.priority == filters["priority"])
    if filters.get("assignedTo"):
        query = query.filter(WorkOrder.assigned_to_id == filters["assignedTo"])
    if actor.role == "STAFF":
        query = query.filter(WorkOrder.created_by_id == actor.user_id)
    return query.order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()).all()


def get_work_order(work_order_id: int) -> WorkOrder:
    return get_or_raise(WorkOrder, work_order_id)


def update_work_order(work_order_id: int, actor_id: int, data: dict) -> WorkOrder:
    """Apply a status and/or technician-notes change.

    Every status change appends a history row. COMPLETED stamps
    completedAt and the SLA's resolvedAt; a late resolution flags the SLA
    overdue.
    """
    work_order = get_or_raise(WorkOrder, work_order_id)
    notes = optional_text(data, "notes", None)
    technician_notes = optional_text(data, "technicianNotes")

    if data.get("status"):
        status = _check_status(data["status"])
        if status != work_order.status:
            now = utcnow()
            work_order.status = status
            if status == "COMPLETED":
                work_order.completed_at = now
                if work_order.sla is not None:
                    work_order.sla.resolved_at = now
                    sla_service.flag_if_breached(work_order.sla, now)
            work_order.status_history.append(
                WorkOrderStatusHistory(status=status, notes=notes, user_id=actor_id)
            )

    if "technicianNotes" in data:
        work_order.technician_notes = technician_notes

    commit_or_raise("update work order", "WorkOrder")
    logger.info("Work order updated id=%s status=%s", work_order.id, work_order.status)

    realtime.publish(
        realtime.ROOM_MANAGERS, realtime.EVENT_WORK_ORDER_UPDATED,
        work_order.to_dict(include_relations=True),
    )
    return work_order


def delete_work_order(work_order_id: int) -> None:
    work_order = get_or_raise(WorkOrder, work_order_id)
    db.session.delete(work_order)
    commit_or_raise("delete work order", "WorkOrder")
    logger.info("Work order deleted id=%s", work_order_id)


# ── Query views ──────────────────────────────────────────────────────────────


def my_requests(user_id: int, status: str | None = None, search: str | None = None) -> list[WorkOrder]:
    """Work orders the user raised, optionally filtered by status and text."""
    query = WorkOrder.query.filter(
        WorkOrder.created_by_id == user_id, WorkOrder.is_active.is_(True),
    )
    if status and status != "all":
        query = query.filter(WorkOrder.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.outerjoin(Location, WorkOrder.location_id == Location.id).filter(
            or_(
                WorkOrder.title.ilike(pattern),
                WorkOrder.description.ilike(pattern),
                Location.name.ilike(pattern),
            )
        )
    return query.order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()).all()


def my_recent(user_id: int, limit: int = 5) -> list[WorkOrder]:
    return (
        WorkOrder.query
        .filter(WorkOrder.created_by_id == user_id, WorkOrder.is_active.is_(True))
        .order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc())
        .limit(limit)
        .all()
    )


def recent_for_hotel(hotel_id: int, limit: int = 10) -> list[WorkOrder]:
    return (
        WorkOrder.query_for_hotel(hotel_id)
        .filter(WorkOrder.is_active.is_(True))
        .order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc())
        .limit(limit)
        .all()
    )


def my_open_count(user_id: int) -> int:
    return WorkOrder.query.filter(
        WorkOrder.created_by_id == user_id,
        WorkOrder.is_active.is_(True),
        WorkOrder.status.in_(OPEN_STATUSES),
    ).count()


# ── Bulk actions ─────────────────────────────────────────────────────────────


def round_robin_assignments(work_order_ids: list, technicians: list) -> list[tuple]:
    """Pair ids[i] with technicians[i mod N]. No state is kept between calls."""
    if not technicians:
        return []
    return [(wo_id, technicians[i % len(technicians)]) for i, wo_id in enumerate(work_order_ids)]


def bulk_action(action, work_order_ids) -> int:
    """Apply assign / cancel / delete to many work orders in one commit.

    Ids may be ints or digit strings; repeats are applied once, in first-seen
    order. Ids that match no row are skipped. assign stamps the SLA's
    assignedAt when it is not yet set.

    Returns:
        Number of work orders affected.

    Raises:
        ValidationError: Unknown action, non-list ids, a non-integer id, or
                         no technicians available for ``assign``.
    """
    if action not in BULK_ACTIONS or not isinstance(work_order_ids, list):
        raise ValidationError(
            "Invalid request body: action must be one of assign, cancel, delete "
            "and workOrderIds must be a list",
            details={"action": "invalid"} if action not in BULK_ACTIONS else {"workOrderIds": "invalid"},
        )
    ids = list(dict.fromkeys(to_id(wo_id, "workOrderIds") for wo_id in work_order_ids))

    rows = {
        wo.id: wo
        for wo in WorkOrder.query.filter(WorkOrder.id.in_(ids)).all()
    } if ids else {}

    affected = 0
    if action == "assign":
        technicians = User.query.filter_by(role="TECHNICIAN").order_by(User.id.asc()).all()
        if not technicians:
            raise ValidationError("No technicians available")
        now = utcnow()
        for wo_id, technician in round_robin_assignments(ids, technicians):
            work_order = rows.get(wo_id)
            if work_order is None:
                continue
            work_order.assigned_to_id = technician.id
            if work_order.sla is not None and work_order.sla.assigned_at is None:
                work_order.sla.assigned_at = now
            work_order.status = "IN_PROGRESS"
            affected += 1
    elif action == "cancel":
        for work_order in rows.values():
            work_order.status = "CANCELLED"
            affected += 1
    else:
        for work_order in rows.values():
            db.session.delete(work_order)
            affected += 1

    commit_or_raise(f"bulk {action}", "WorkOrder")
    logger.info("Bulk %s applied to %d of %d work order(s)", action, affected, len(ids))
    return affected


# ── Comments ─────────────────────────────────────────────────────────────────


def add_comment(work_order_id: int, data: dict, actor=None) -> WorkOrderComment:
    """Append a comment. ``author`` falls back to the caller's name."""
    work_order = get_or_raise(WorkOrder, work_order_id)
    require_fields(data, "content", text=("content",))

    comment_type = optional_text(data, "type", "comment").lower()
    if comment_type not in COMMENT_TYPES:
        raise ValidationError(f"Invalid comment type: {comment_type}", details={"type": "invalid"})
    author = optional_text(data, "author", None)
    if not author and actor is not None:
        author = actor.name
        if not author:
            user = db.session.get(User, actor.user_id)
            author = user.name if user else None
    if not author:
        raise ValidationError("author is required", details={"author": "required"})

    comment = WorkOrderComment(
        work_order_id=work_order.id,
        content=data["content"],
        author=author,
        type=comment_type,
    )
    db.session.add(comment)
    commit_or_raise("add work order comment", "WorkOrderComment")
    logger.info("Comment added id=%s work_order=%s", comment.id, work_order.id)
    return comment


def list_comments(work_order_id: int) -> list[WorkOrderComment]:
    get_or_raise(WorkOrder, work_order_id)
    return (
        WorkOrderComment.query
        .filter_by(work_order_id=work_order_id)
        .order_by(WorkOrderComment.created_at.desc(), WorkOrderComment.id.desc())
        .all()
    )

"""PPM service layer: schedules, the work-order generator and due-date arithmetic.

Rules:
  - db.session.commit() happens only in this file (via commit_or_raise).
  - The generator writes its work order and follow-up task in one transaction.
  - Relay events are published only after a successful commit.
"""

from __future__ import annotations

import logging
from datetime import datetime

from dateutil.relativedelta import relativedelta

from facilities.core.exceptions import ValidationError
from facilities.models import db
from facilities.models.asset import Asset
from facilities.models.base import as_utc, utcnow
from facilities.models.hotel import Hotel, Location, User
from facilities.models.ppm import PPM_FREQUENCIES, PPM_TERMINAL_STATUSES, PPMSchedule, PPMTask
from facilities.models.work_order import WorkOrder
from facilities.services import realtime
from facilities.utils.helpers import (
    commit_or_raise,
    get_or_raise,
    optional_text,
    parse_datetime,
    require_fields,
)

logger = logging.getLogger(__name__)

PPM_CATEGORY = "Preventive Maintenance"

_FREQUENCY_OFFSETS = {
    "DAILY": relativedelta(days=1),
    "WEEKLY": relativedelta(days=7),
    "MONTHLY": relativedelta(months=1),
    "QUARTERLY": relativedelta(months=3),
    "YEARLY": relativedelta(years=1),
}
_FALLBACK_OFFSET = relativedelta(days=30)


# ── Pure helpers ─────────────────────────────────────────────────────────────


def next_due_date(now: datetime, frequency: str | None) -> datetime:
    """Return the next due date for a schedule frequency.

    Month and year steps clamp to the last day of the target month
    (2024-01-31 + MONTHLY -> 2024-02-29). Unknown or missing frequencies
    fall back to 30 days.
    """
    offset = _FREQUENCY_OFFSETS.get((frequency or "").upper(), _FALLBACK_OFFSET)
    return now + offset


def ppm_task_status(now: datetime, due_date: datetime, current_status: str) -> str:
    """Derive a task's status from its due date; terminal statuses are kept."""
    if current_status in PPM_TERMINAL_STATUSES:
        return current_status
    return "OVERDUE" if as_utc(due_date) < now else "SCHEDULED"


def schedule_summary(schedule: PPMSchedule) -> dict:
    """Serialise a schedule with task counters taken from its loaded tasks."""
    tasks = schedule.tasks
    data = schedule.to_dict()
    data["taskCount"] = len(tasks)
    data["activeTasks"] = sum(1 for t in tasks if t.status == "SCHEDULED")
    data["overdueTasks"] = sum(1 for t in tasks if t.status == "OVERDUE")
    return data


# ── Schedules ────────────────────────────────────────────────────────────────


def create_schedule(data: dict) -> PPMSchedule:
    """Create an active PPM schedule.

    Raises:
        ValidationError: Missing or non-text fields, unknown frequency, bad dates.
        NotFoundError: hotelId does not exist.
    """
    require_fields(data, "name", "frequency", "startDate", "hotelId", text=("name", "frequency"))

    frequency = str(data["frequency"]).strip().upper()
    if frequency not in PPM_FREQUENCIES:
        raise ValidationError(
            f"frequency must be one of: {', '.join(PPM_FREQUENCIES)}",
            details={"frequency": "invalid"},
        )

    start_date = parse_datetime(data["startDate"], "startDate")
    end_date = parse_datetime(data.get("endDate"), "endDate")
    if end_date is not None and end_date < start_date:
        raise ValidationError(
            "endDate must not precede startDate", details={"endDate": "before startDate"},
        )

    hotel = get_or_raise(Hotel, data["hotelId"], field="hotelId")

    schedule = PPMSchedule(
        name=data["name"].strip(),
        description=optional_text(data, "description"),
        frequency=frequency,
        start_date=start_date,
        end_date=end_date,
        is_active=True,
        hotel_id=hotel.id,
    )
    db.session.add(schedule)
    commit_or_raise("create PPM schedule", "PPMSchedule")
    logger.info("PPM schedule created id=%s hotel=%s frequency=%s", schedule.id, hotel.id, frequency)
    return schedule


def list_schedules(hotel_id: int | None = None) -> list[PPMSchedule]:
    """Schedules ordered by start date, optionally for one hotel."""
    query = PPMSchedule.query_for_hotel(hotel_id) if hotel_id else PPMSchedule.query
    return query.order_by(PPMSchedule.start_date.asc(), PPMSchedule.id.asc()).all()


def set_active(schedule_id: int, is_active) -> PPMSchedule:
    """Flip a schedule's isActive flag. Child tasks are left untouched."""
    if not isinstance(is_active, bool):
        raise ValidationError("isActive must be a boolean", details={"isActive": "invalid"})

    schedule = get_or_raise(PPMSchedule, schedule_id)
    schedule.is_active = is_active
    commit_or_raise("update PPM schedule", "PPMSchedule")
    logger.info("PPM schedule id=%s is_active=%s", schedule.id, is_active)

    realtime.publish(
        realtime.ROOM_TECHNICIANS, realtime.EVENT_PPM_SCHEDULE_UPDATED, schedule.to_dict(),
    )
    return schedule


# ── Work order generator ─────────────────────────────────────────────────────


def generate_work_order(schedule_id: int, actor_id: int, data: dict,
                        now: datetime | None = None) -> WorkOrder:
    """Materialise a work order (and optionally the next task) from a schedule.

    Args:
        schedule_id: Source schedule.
        actor_id:    Authenticated user recorded as the work order's creator.
        data:        {taskId?, locationId, assetId, assignedToId?}
        now:         Clock override for the follow-up task's due date.

    Returns:
        The committed WorkOrder.

    Raises:
        NotFoundError: Schedule, location, asset or assignee does not exist.
        ValidationError: locationId or assetId missing or not an integer id.
        PersistenceError: The store rejected the write; nothing was saved.
    """
    schedule = get_or_raise(PPMSchedule, schedule_id)
    require_fields(data, "locationId", "assetId")
    location = get_or_raise(Location, data["locationId"], field="locationId")
    asset = get_or_raise(Asset, data["assetId"], field="assetId")
    assigned_to_id = data.get("assignedToId")
    if assigned_to_id is not None:
        assigned_to_id = get_or_raise(User, assigned_to_id, field="assignedToId").id

    work_order = WorkOrder(
        title=f"PPM: {schedule.name}",
        description=schedule.description or f"Preventive maintenance for {schedule.name}",
        status="LOGGED",
        priority="MEDIUM",
        category=PPM_CATEGORY,
        location_id=location.id,
        asset_id=asset.id,
        hotel_id=schedule.hotel_id,
        created_by_id=actor_id,
        assigned_to_id=assigned_to_id,
    )
    db.session.add(work_order)

    task = None
    if data.get("taskId") is not None:
        task = PPMTask(
            title=f"PPM Task: {schedule.name}",
            description=schedule.description or "",
            due_date=next_due_date(now or utcnow(), schedule.frequency),
            status="SCHEDULED",
            schedule_id=schedule.id,
            asset_id=asset.id,
            assigned_to_id=assigned_to_id,
        )
        db.session.add(task)

    commit_or_raise("generate PPM work order", "WorkOrder")
    logger.info(
        "PPM work order generated id=%s schedule=%s actor=%s follow_up_task=%s",
        work_order.id, schedule.id, actor_id, task.id if task else None,
    )

    realtime.publish(
        realtime.ROOM_MANAGERS, realtime.EVENT_WORK_ORDER_CREATED,
        work_order.to_dict(include_relations=True),
    )
    return work_order


# ── Task maintenance ─────────────────────────────────────────────────────────


def mark_overdue_tasks(now: datetime | None = None) -> int:
    """Move SCHEDULED tasks whose due date has passed to OVERDUE.

    Returns:
        Number of tasks changed.
    """
    now = now or utcnow()
    changed = 0
    for task in PPMTask.query.filter_by(status="SCHEDULED").all():
        status = ppm_task_status(now, task.due_date, task.status)
        if status != task.status:
            task.status = status
            changed += 1
    if changed:
        commit_or_raise("mark overdue PPM tasks", "PPMTask")
    logger.info("Overdue sweep complete: %d task(s) marked OVERDUE", changed)
    return changed

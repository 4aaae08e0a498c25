"""SLA tracking: per-work-order response / resolution timings and the SLA dashboard.

Actual times are derived from the SLA record, in minutes since it was opened:

    actualResponseTime     assignedAt - createdAt     (None until assigned)
    actualResolutionTime   resolvedAt - createdAt     (None until resolved)

A record is overdue once its resolution target has passed without (or
before) resolution, or its response target has passed while it is still
unassigned. The stored is_overdue flag is only ever raised, by
mark_overdue_slas() and when a work order is completed; a breach is never
cleared.
"""

from __future__ import annotations

import logging
from datetime import datetime

from facilities.core.exceptions import ValidationError
from facilities.models.base import as_utc, iso, utcnow
from facilities.models.work_order import PRIORITIES, WorkOrder, WorkOrderSLA
from facilities.utils.helpers import commit_or_raise

logger = logging.getLogger(__name__)

SLA_STATUS_FILTERS = ("overdue", "compliant", "pending")


def _minutes_between(start: datetime, end: datetime) -> float:
    return (as_utc(end) - as_utc(start)).total_seconds() / 60


def actual_response_time(sla: WorkOrderSLA) -> float | None:
    if sla.assigned_at is None:
        return None
    return _minutes_between(sla.created_at, sla.assigned_at)


def actual_resolution_time(sla: WorkOrderSLA) -> float | None:
    if sla.resolved_at is None:
        return None
    return _minutes_between(sla.created_at, sla.resolved_at)


def is_breached(sla: WorkOrderSLA, now: datetime) -> bool:
    """True when the record has missed a target as of ``now``."""
    elapsed_to_resolution = _minutes_between(sla.created_at, sla.resolved_at or now)
    if elapsed_to_resolution > sla.expected_resolution_time:
        return True
    if sla.assigned_at is None and sla.resolved_at is None:
        return _minutes_between(sla.created_at, now) > sla.expected_response_time
    return False


def is_compliant(sla: WorkOrderSLA) -> bool:
    """Not overdue, and at least one measured time is within target."""
    if sla.is_overdue:
        return False
    response = actual_response_time(sla)
    resolution = actual_resolution_time(sla)
    return (
        (response is not None and response <= sla.expected_response_time)
        or (resolution is not None and resolution <= sla.expected_resolution_time)
    )


def flag_if_breached(sla: WorkOrderSLA | None, now: datetime) -> bool:
    """Raise is_overdue on a breached record. The caller commits."""
    if sla is None or sla.is_overdue or not is_breached(sla, now):
        return False
    sla.is_overdue = True
    return True


def mark_overdue_slas(now: datetime | None = None) -> int:
    """Flag every not-yet-overdue SLA record that has missed a target.

    Returns:
        Number of records flagged.
    """
    now = now or utcnow()
    changed = 0
    for sla in WorkOrderSLA.query.filter(WorkOrderSLA.is_overdue.is_(False)).all():
        if flag_if_breached(sla, now):
            changed += 1
    if changed:
        commit_or_raise("mark overdue SLAs", "WorkOrderSLA")
    logger.info("SLA sweep complete: %d record(s) marked overdue", changed)
    return changed


# ── Dashboard ────────────────────────────────────────────────────────────────


def sla_entry(sla: WorkOrderSLA) -> dict:
    data = sla.to_dict()
    data.update({
        "id": sla.id,
        "workOrderId": sla.work_order_id,
        "category": sla.category,
        "priority": sla.priority,
        "createdAt": iso(sla.created_at),
        "actualResponseTime": actual_response_time(sla),
        "actualResolutionTime": actual_resolution_time(sla),
        "workOrder": sla.work_order.to_dict(include_relations=True),
    })
    return data


def compute_metrics(records: list[WorkOrderSLA]) -> dict:
    """On-time counts, average actual times (minutes) and compliance rates (%).

    Averages and rates only count records with a measured time; with none
    they are 0.
    """
    responses = [(actual_response_time(s), s.expected_response_time) for s in records]
    responses = [(actual, target) for actual, target in responses if actual is not None]
    resolutions = [(actual_resolution_time(s), s.expected_resolution_time) for s in records]
    resolutions = [(actual, target) for actual, target in resolutions if actual is not None]

    on_time_response = sum(1 for actual, target in responses if actual <= target)
    on_time_resolution = sum(1 for actual, target in resolutions if actual <= target)

    def _average(pairs):
        return round(sum(actual for actual, _ in pairs) / len(pairs), 2) if pairs else 0

    def _rate(hits, pairs):
        return round(hits / len(pairs) * 100, 2) if pairs else 0

    return {
        "totalWorkOrders": len(records),
        "onTimeResponse": on_time_response,
        "onTimeResolution": on_time_resolution,
        "averageResponseTime": _average(responses),
        "averageResolutionTime": _average(resolutions),
        "overdueCount": sum(1 for s in records if s.is_overdue),
        "responseComplianceRate": _rate(on_time_response, responses),
        "resolutionComplianceRate": _rate(on_time_resolution, resolutions),
    }


def get_dashboard(hotel_id: int, filters: dict) -> dict:
    """SLA records of the hotel's active work orders plus their metrics.

    Filters: priority, category (exact), status (overdue | compliant |
    pending). Overdue records come first, then newest first.

    Raises:
        ValidationError: Unknown priority or status filter.
    """
    query = (
        WorkOrderSLA.query
        .join(WorkOrder, WorkOrderSLA.work_order_id == WorkOrder.id)
        .filter(WorkOrder.hotel_id == hotel_id, WorkOrder.is_active.is_(True))
    )

    priority = filters.get("priority")
    if priority:
        priority = priority.upper()
        if priority not in PRIORITIES:
            raise ValidationError(f"Invalid priority: {priority}", details={"priority": "invalid"})
        query = query.filter(WorkOrderSLA.priority == priority)
    if filters.get("category"):
        query = query.filter(WorkOrderSLA.category == filters["category"])

    status = filters.get("status")
    if status and status not in SLA_STATUS_FILTERS:
        raise ValidationError(
            f"status must be one of: {', '.join(SLA_STATUS_FILTERS)}", details={"status": "invalid"},
        )
    if status == "overdue":
        query = query.filter(WorkOrderSLA.is_overdue.is_(True))
    elif status == "pending":
        query = query.filter(WorkOrderSLA.assigned_at.is_(None), WorkOrderSLA.resolved_at.is_(None))

    records = query.order_by(
        WorkOrderSLA.is_overdue.desc(), WorkOrderSLA.created_at.desc(), WorkOrderSLA.id.desc(),
    ).all()
    if status == "compliant":
        records = [s for s in records if is_compliant(s)]

    metrics = compute_metrics(records)
    logger.debug("SLA dashboard hotel=%s filters=%s total=%d", hotel_id, filters, len(records))
    return {"slaData": [sla_entry(s) for s in records], "metrics": metrics}

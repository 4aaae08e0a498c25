"""Dashboard aggregator: read-only rollups for the manager home screen."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from flask import current_app

from facilities.models.base import utcnow
from facilities.models.ppm import PPMSchedule, PPMTask
from facilities.models.work_order import OPEN_STATUSES, WorkOrder

logger = logging.getLogger(__name__)

DUE_SOON_WINDOW = timedelta(days=7)


def get_stats(hotel_id: int, now: datetime | None = None) -> dict:
    """PPM and work-order counters for one hotel.

    averageResponseTime, monthlySpend and assetUptime are not derived from
    data; they come from configuration.
    """
    now = now or utcnow()
    tasks = PPMTask.query.join(PPMSchedule).filter(PPMSchedule.hotel_id == hotel_id)

    overdue = tasks.filter(PPMTask.status == "OVERDUE").count()
    due_soon = tasks.filter(
        PPMTask.status == "SCHEDULED", PPMTask.due_date <= now + DUE_SOON_WINDOW,
    ).count()
    compliant = tasks.filter(PPMTask.status == "COMPLETED").count()

    open_high = WorkOrder.query_for_hotel(hotel_id).filter(
        WorkOrder.priority == "HIGH",
        WorkOrder.status.in_(OPEN_STATUSES),
        WorkOrder.is_active.is_(True),
    ).count()

    cfg = current_app.config
    stats = {
        "overduePPM": overdue,
        "dueSoonPPM": due_soon,
        "compliantPPM": compliant,
        "openHighPriority": open_high,
        "averageResponseTime": cfg["DASHBOARD_AVERAGE_RESPONSE_MINUTES"],
        "monthlySpend": cfg["DASHBOARD_MONTHLY_SPEND"],
        "assetUptime": cfg["DASHBOARD_ASSET_UPTIME"],
    }
    logger.debug("Dashboard stats hotel=%s %s", hotel_id, stats)
    return stats

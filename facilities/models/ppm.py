"""
Hotel Facilities Platform
Preventive-maintenance (PPM) models.

Models:
    - PPMSchedule: recurring maintenance definition owned by a hotel
    - PPMTask:     one due occurrence of a schedule

Schedules are never hard-deleted — they are deactivated through is_active.
Deactivating a schedule does not touch its tasks.
"""

from facilities.models import db
from facilities.models.base import HotelScopedModel, TimestampMixin, iso


# ── Constants ────────────────────────────────────────────────────────────────

PPM_FREQUENCIES = ("DAILY", "WEEKLY", "MONTHLY", "QUARTERLY", "YEARLY")
PPM_TASK_STATUSES = frozenset({"SCHEDULED", "COMPLETED", "OVERDUE", "CANCELLED"})
PPM_TERMINAL_STATUSES = frozenset({"COMPLETED", "CANCELLED"})


class PPMSchedule(HotelScopedModel):
    """Recurring maintenance definition."""

    __tablename__ = "ppm_schedules"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default="")
    frequency = db.Column(db.String(20), nullable=False,
                          comment="DAILY | WEEKLY | MONTHLY | QUARTERLY | YEARLY")
    start_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    hotel = db.relationship("Hotel")
    tasks = db.relationship(
        "PPMTask", back_populates="schedule", order_by="PPMTask.due_date",
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_tasks=False):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "frequency": self.frequency,
            "startDate": iso(self.start_date),
            "endDate": iso(self.end_date),
            "isActive": self.is_active,
            "hotelId": self.hotel_id,
            "hotel": self.hotel.name if self.hotel else None,
        }
        if include_tasks:
            data["tasks"] = [t.to_dict() for t in self.tasks]
        return data

    def __repr__(self):
        return f"<PPMSchedule {self.id}: {self.name} [{self.frequency}]>"


class PPMTask(TimestampMixin, db.Model):
    """A single due occurrence generated from a schedule."""

    __tablename__ = "ppm_tasks"

    id = db.Column(db.Integer, primary_key=True)
    schedule_id = db.Column(
        db.Integer, db.ForeignKey("ppm_schedules.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    asset_id = db.Column(
        db.Integer, db.ForeignKey("assets.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    assigned_to_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, default="")
    due_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="SCHEDULED",
                       comment="SCHEDULED | COMPLETED | OVERDUE | CANCELLED")

    schedule = db.relationship("PPMSchedule", back_populates="tasks")
    asset = db.relationship("Asset")
    assigned_to = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": iso(self.due_date),
            "status": self.status,
            "scheduleId": self.schedule_id,
            "assetId": self.asset_id,
            "assignedToId": self.assigned_to_id,
            "asset": self.asset.to_summary() if self.asset else None,
            "assignedTo": self.assigned_to.to_summary() if self.assigned_to else None,
        }

    def __repr__(self):
        return f"<PPMTask {self.id}: {self.title} due={self.due_date} [{self.status}]>"

"""
Hotel Facilities Platform
Work order domain models.

Models:
    - WorkOrder:              trackable unit of maintenance work
    - WorkOrderComment:       comment thread entry
    - WorkOrderStatusHistory: append-only status trail
    - WorkOrderSLA:           response / resolution targets per work order
    - AssignmentRule:         auto-assignment rule (category/priority/location → assignee)
"""

from facilities.models import db
from facilities.models.base import HotelScopedModel, TimestampMixin, iso, utcnow


# ── Constants ────────────────────────────────────────────────────────────────

WORK_ORDER_STATUSES = frozenset({"LOGGED", "IN_PROGRESS", "ON_HOLD", "COMPLETED", "CANCELLED"})
OPEN_STATUSES = ("LOGGED", "IN_PROGRESS", "ON_HOLD")
PRIORITIES = frozenset({"LOW", "MEDIUM", "HIGH", "CRITICAL"})
COMMENT_TYPES = frozenset({"comment", "note", "update", "system"})


class WorkOrder(HotelScopedModel):
    __tablename__ = "work_orders"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, default="")
    status = db.Column(db.String(20), nullable=False, default="LOGGED", index=True)
    priority = db.Column(db.String(20), nullable=False, default="MEDIUM", index=True)
    category = db.Column(db.String(100), nullable=False)

    location_id = db.Column(
        db.Integer, db.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    asset_id = db.Column(
        db.Integer, db.ForeignKey("assets.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    created_by_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    assigned_to_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )

    technician_notes = db.Column(db.Text, nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    location = db.relationship("Location")
    asset = db.relationship("Asset")
    hotel = db.relationship("Hotel")
    created_by = db.relationship("User", foreign_keys=[created_by_id])
    assigned_to = db.relationship("User", foreign_keys=[assigned_to_id])

    comments = db.relationship(
        "WorkOrderComment", back_populates="work_order",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    status_history = db.relationship(
        "WorkOrderStatusHistory", back_populates="work_order",
        order_by="WorkOrderStatusHistory.created_at.desc()",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    sla = db.relationship(
        "WorkOrderSLA", back_populates="work_order", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def to_dict(self, include_relations=False):
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "category": self.category,
            "locationId": self.location_id,
            "assetId": self.asset_id,
            "hotelId": self.hotel_id,
            "createdById": self.created_by_id,
            "assignedToId": self.assigned_to_id,
            "technicianNotes": self.technician_notes,
            "completedAt": iso(self.completed_at),
            "isActive": self.is_active,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
        if include_relations:
            data.update({
                "createdBy": self.created_by.to_summary() if self.created_by else None,
                "assignedTo": self.assigned_to.to_summary() if self.assigned_to else None,
                "location": {"id": self.location.id, "name": self.location.name} if self.location else None,
                "asset": self.asset.to_summary() if self.asset else None,
                "hotel": {"id": self.hotel.id, "name": self.hotel.name} if self.hotel else None,
            })
        return data

    def __repr__(self):
        return f"<WorkOrder {self.id}: {self.title[:40]} [{self.status}]>"


class WorkOrderComment(db.Model):
    __tablename__ = "work_order_comments"

    id = db.Column(db.Integer, primary_key=True)
    work_order_id = db.Column(
        db.Integer, db.ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    content = db.Column(db.Text, nullable=False)
    author = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(20), nullable=False, default="comment")
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    work_order = db.relationship("WorkOrder", back_populates="comments")

    def to_dict(self):
        return {
            "id": self.id,
            "workOrderId": self.work_order_id,
            "content": self.content,
            "author": self.author,
            "type": self.type,
            "createdAt": iso(self.created_at),
        }


class WorkOrderStatusHistory(db.Model):
    """Append-only: one row per status change, never updated."""

    __tablename__ = "work_order_status_history"

    id = db.Column(db.Integer, primary_key=True)
    work_order_id = db.Column(
        db.Integer, db.ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    status = db.Column(db.String(20), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    work_order = db.relationship("WorkOrder", back_populates="status_history")
    user = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "status": self.status,
            "notes": self.notes,
            "user": {"id": self.user.id, "name": self.user.name} if self.user else None,
            "createdAt": iso(self.created_at),
        }


class WorkOrderSLA(db.Model):
    __tablename__ = "work_order_slas"

    id = db.Column(db.Integer, primary_key=True)
    work_order_id = db.Column(
        db.Integer, db.ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    category = db.Column(db.String(100), nullable=False)
    priority = db.Column(db.String(20), nullable=False)
    expected_response_time = db.Column(db.Integer, nullable=False, comment="Minutes")
    expected_resolution_time = db.Column(db.Integer, nullable=False, comment="Minutes")
    assigned_at = db.Column(db.DateTime(timezone=True), nullable=True)
    resolved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    is_overdue = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    work_order = db.relationship("WorkOrder", back_populates="sla")

    def to_dict(self):
        return {
            "expectedResponseTime": self.expected_response_time,
            "expectedResolutionTime": self.expected_resolution_time,
            "assignedAt": iso(self.assigned_at),
            "resolvedAt": iso(self.resolved_at),
            "isOverdue": self.is_overdue,
        }


class AssignmentRule(HotelScopedModel):
    """
    Auto-assignment rule.

    priority and location_id are optional; a null value means "any". The
    assignment engine prefers the most specific matching rule.
    """

    __tablename__ = "assignment_rules"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default="")
    category = db.Column(db.String(100), nullable=False)
    priority = db.Column(db.String(20), nullable=True)
    location_id = db.Column(
        db.Integer, db.ForeignKey("locations.id", ondelete="CASCADE"), nullable=True,
    )
    assignee_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    hotel = db.relationship("Hotel")
    location = db.relationship("Location")
    assignee = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "hotelId": self.hotel_id,
            "hotel": self.hotel.name if self.hotel else None,
            "category": self.category,
            "priority": self.priority,
            "locationId": self.location_id,
            "location": self.location.name if self.location else None,
            "assigneeId": self.assignee_id,
            "assignee": self.assignee.to_summary() if self.assignee else None,
            "isActive": self.is_active,
            "createdAt": iso(self.created_at),
        }

    def __repr__(self):
        return f"<AssignmentRule {self.id}: {self.name}>"

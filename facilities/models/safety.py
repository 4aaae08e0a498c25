"""
Hotel Facilities Platform
Safety & compliance models.

Models:
    - Certificate:     staff certification with an expiry date
    - SafetyIncident:  reported incident with follow-up actions
    - TrainingRecord:  completed / scheduled staff training

Certificate status (VALID / EXPIRING / EXPIRED) is intentionally NOT a column:
it depends on the current time and is derived on every read by
facilities.services.safety_service.certificate_status().
"""

from facilities.models import db
from facilities.models.base import TimestampMixin, iso, utcnow


# ── Constants ────────────────────────────────────────────────────────────────

INCIDENT_SEVERITIES = frozenset({"LOW", "MEDIUM", "HIGH", "CRITICAL"})
INCIDENT_STATUSES = frozenset({"OPEN", "INVESTIGATING", "RESOLVED", "CLOSED"})
TRAINING_STATUSES = frozenset({"SCHEDULED", "IN_PROGRESS", "COMPLETED", "FAILED"})


class Certificate(TimestampMixin, db.Model):
    __tablename__ = "certificates"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
        comment="FK to users.id — resolved from the external employee number on create",
    )
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, default="")
    category = db.Column(db.String(100), nullable=False)
    issued_by = db.Column(db.String(200), nullable=False)
    issued_date = db.Column(db.DateTime(timezone=True), nullable=False)
    expiry_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    document_url = db.Column(db.String(1000), nullable=True)
    reminder_sent = db.Column(db.Boolean, default=False, nullable=False)

    employee = db.relationship("User")

    def to_dict(self, status=None):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "issuedBy": self.issued_by,
            "issuedDate": iso(self.issued_date),
            "expiryDate": iso(self.expiry_date),
            "status": status,
            "employeeName": self.employee.name if self.employee else None,
            "employeeId": self.employee.employee_id if self.employee else None,
            "documentUrl": self.document_url,
            "reminderSent": self.reminder_sent,
        }

    def __repr__(self):
        return f"<Certificate {self.id}: {self.title} expires={self.expiry_date}>"


class SafetyIncident(TimestampMixin, db.Model):
    __tablename__ = "safety_incidents"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, default="")
    severity = db.Column(db.String(20), nullable=False, default="MEDIUM")
    status = db.Column(db.String(20), nullable=False, default="OPEN")
    location_id = db.Column(
        db.Integer, db.ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    reported_by_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    reported_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    resolved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    actions = db.Column(db.JSON, default=list, comment="Follow-up actions taken")

    location = db.relationship("Location")
    reported_by = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "severity": self.severity,
            "status": self.status,
            "location": self.location.name if self.location else None,
            "reportedBy": self.reported_by.name if self.reported_by else None,
            "reportedAt": iso(self.reported_at),
            "resolvedAt": iso(self.resolved_at),
            "actions": self.actions or [],
        }


class TrainingRecord(TimestampMixin, db.Model):
    __tablename__ = "training_records"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    certificate_id = db.Column(
        db.Integer, db.ForeignKey("certificates.id", ondelete="SET NULL"), nullable=True,
    )
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, default="")
    category = db.Column(db.String(100), nullable=False)
    completion_date = db.Column(db.DateTime(timezone=True), nullable=True, index=True)
    score = db.Column(db.Float, nullable=True)
    status = db.Column(db.String(20), nullable=False, default="SCHEDULED")

    employee = db.relationship("User")
    certificate = db.relationship("Certificate")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "completionDate": iso(self.completion_date),
            "score": self.score,
            "status": self.status,
            "employeeName": self.employee.name if self.employee else None,
            "employeeId": self.employee.employee_id if self.employee else None,
            "certificateId": self.certificate_id,
        }

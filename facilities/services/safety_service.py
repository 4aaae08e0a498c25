"""Safety & compliance service: certificates, incidents and training records.

Certificate status is derived from the expiry date on every read:

    expiry <= now                      EXPIRED
    now < expiry <= now + 30 days      EXPIRING
    otherwise                          VALID

EXPIRING certificates get one reminder each (send_expiry_reminders); the
reminder_sent flag keeps the sweep from repeating it.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from facilities.core.exceptions import NotFoundError, ValidationError
from facilities.models import db
from facilities.models.base import as_utc, utcnow
from facilities.models.hotel import Location, User
from facilities.models.safety import INCIDENT_SEVERITIES, Certificate, SafetyIncident, TrainingRecord
from facilities.services import realtime
from facilities.utils.helpers import (
    commit_or_raise,
    get_or_raise,
    optional_text,
    parse_datetime,
    require_fields,
)

logger = logging.getLogger(__name__)

EXPIRY_WARNING_WINDOW = timedelta(days=30)


def certificate_status(now: datetime, expiry_date: datetime) -> str:
    remaining = as_utc(expiry_date) - now
    if remaining <= timedelta(0):
        return "EXPIRED"
    if remaining <= EXPIRY_WARNING_WINDOW:
        return "EXPIRING"
    return "VALID"


# ── Certificates ─────────────────────────────────────────────────────────────


def list_certificates(now: datetime | None = None) -> list[dict]:
    """All certificates by expiry date, each with its derived status."""
    now = now or utcnow()
    certificates = Certificate.query.order_by(Certificate.expiry_date.asc(), Certificate.id.asc()).all()
    return [c.to_dict(status=certificate_status(now, c.expiry_date)) for c in certificates]


def create_certificate(data: dict) -> Certificate:
    """Record a certificate for the employee with the given staff number.

    Raises:
        ValidationError: Missing or non-text fields, unparseable dates.
        NotFoundError: No user carries that employeeId.
    """
    require_fields(data, "title", "category", "issuedBy", "issuedDate", "expiryDate", "employeeId",
                   text=("title", "category", "issuedBy"))
    issued_date = parse_datetime(data["issuedDate"], "issuedDate")
    expiry_date = parse_datetime(data["expiryDate"], "expiryDate")

    employee = User.query.filter_by(employee_id=str(data["employeeId"])).first()
    if employee is None:
        raise NotFoundError(resource="Employee", resource_id=data["employeeId"])

    certificate = Certificate(
        title=data["title"].strip(),
        description=optional_text(data, "description"),
        category=data["category"],
        issued_by=data["issuedBy"],
        issued_date=issued_date,
        expiry_date=expiry_date,
        employee_id=employee.id,
        document_url=optional_text(data, "documentUrl", None),
        reminder_sent=False,
    )
    db.session.add(certificate)
    commit_or_raise("create certificate", "Certificate")
    logger.info("Certificate created id=%s employee=%s expires=%s",
                certificate.id, employee.id, expiry_date.date())
    return certificate


def send_expiry_reminders(now: datetime | None = None) -> int:
    """Raise one expiry reminder per EXPIRING certificate.

    Each certificate not yet reminded is flagged reminder_sent in a single
    commit, then announced to the managers room with its days remaining.
    Expired and valid certificates are left alone.

    Returns:
        Number of reminders raised.
    """
    now = now or utcnow()
    due = [
        c for c in Certificate.query
        .filter(Certificate.reminder_sent.is_(False))
        .order_by(Certificate.expiry_date.asc(), Certificate.id.asc())
        .all()
        if certificate_status(now, c.expiry_date) == "EXPIRING"
    ]
    if not due:
        logger.info("Certificate reminder sweep complete: nothing due")
        return 0

    for certificate in due:
        certificate.reminder_sent = True
    commit_or_raise("send certificate expiry reminders", "Certificate")

    for certificate in due:
        days_left = math.ceil((as_utc(certificate.expiry_date) - now).total_seconds() / 86400)
        logger.info("Certificate expiring id=%s employee=%s days_left=%d",
                    certificate.id, certificate.employee_id, days_left)
        payload = certificate.to_dict(status="EXPIRING")
        payload["daysUntilExpiry"] = days_left
        realtime.publish(realtime.ROOM_MANAGERS, realtime.EVENT_CERTIFICATE_EXPIRING, payload)
    logger.info("Certificate reminder sweep complete: %d reminder(s) raised", len(due))
    return len(due)


# ── Incidents ────────────────────────────────────────────────────────────────


def list_incidents() -> list[SafetyIncident]:
    return SafetyIncident.query.order_by(SafetyIncident.reported_at.desc(), SafetyIncident.id.desc()).all()


def report_incident(reporter_id: int, data: dict) -> SafetyIncident:
    """Record a new OPEN incident and alert the managers room."""
    require_fields(data, "title", "locationId", text=("title",))
    severity = str(data.get("severity") or "MEDIUM").upper()
    if severity not in INCIDENT_SEVERITIES:
        raise ValidationError(f"Invalid severity: {severity}", details={"severity": "invalid"})
    actions = data.get("actions") or []
    if not isinstance(actions, list):
        raise ValidationError("actions must be a list", details={"actions": "invalid"})
    location = get_or_raise(Location, data["locationId"], field="locationId")

    incident = SafetyIncident(
        title=data["title"].strip(),
        description=optional_text(data, "description"),
        severity=severity,
        status="OPEN",
        location_id=location.id,
        reported_by_id=reporter_id,
        actions=actions,
    )
    db.session.add(incident)
    commit_or_raise("report safety incident", "SafetyIncident")
    logger.info("Safety incident reported id=%s severity=%s location=%s",
                incident.id, severity, location.id)

    realtime.publish(
        realtime.ROOM_MANAGERS, realtime.EVENT_SAFETY_INCIDENT_REPORTED, incident.to_dict(),
    )
    return incident


# ── Training ─────────────────────────────────────────────────────────────────


def list_training_records() -> list[TrainingRecord]:
    return (
        TrainingRecord.query
        .order_by(TrainingRecord.completion_date.desc(), TrainingRecord.id.desc())
        .all()
    )

"""Assignment engine: rule matching, SLA targets and assignment-rule CRUD.

A work order is matched against the hotel's active rules from most to least
specific:

    1. category + priority + location
    2. category + priority          (rule has no location)
    3. category + location          (rule has no priority)
    4. category only

Category comparison is case-insensitive. A matching rule whose assignee is
inactive yields no assignment; the engine does not fall through to a less
specific rule in that case.
"""

from __future__ import annotations

import logging

from sqlalchemy import func

from facilities.core.exceptions import ValidationError
from facilities.models import db
from facilities.models.hotel import Hotel, Location, User
from facilities.models.work_order import PRIORITIES, AssignmentRule
from facilities.utils.helpers import commit_or_raise, get_or_raise, optional_text, require_fields

logger = logging.getLogger(__name__)

# priority -> (expected response, expected resolution) in minutes
SLA_DEFAULTS = {
    "CRITICAL": (60, 480),
    "HIGH": (120, 720),
    "MEDIUM": (240, 1440),
    "LOW": (480, 2880),
}

ASSIGNABLE_ROLES = frozenset({"TECHNICIAN", "MANAGER", "ADMIN"})


def sla_targets(priority: str) -> tuple[int, int]:
    """Response/resolution minutes for a priority (MEDIUM for unknown values)."""
    return SLA_DEFAULTS.get((priority or "").upper(), SLA_DEFAULTS["MEDIUM"])


def find_assignee(category: str, priority: str, location_id: int | None,
                  hotel_id: int) -> User | None:
    """Return the user the most specific active rule points at, or None."""
    base = AssignmentRule.query_for_hotel(hotel_id).filter(
        AssignmentRule.is_active.is_(True),
        func.lower(AssignmentRule.category) == (category or "").lower(),
    )

    candidates = []
    if location_id is not None:
        candidates.append(base.filter(AssignmentRule.priority == priority,
                                      AssignmentRule.location_id == location_id))
    candidates.append(base.filter(AssignmentRule.priority == priority,
                                  AssignmentRule.location_id.is_(None)))
    if location_id is not None:
        candidates.append(base.filter(AssignmentRule.priority.is_(None),
                                      AssignmentRule.location_id == location_id))
    candidates.append(base.filter(AssignmentRule.priority.is_(None),
                                  AssignmentRule.location_id.is_(None)))

    for query in candidates:
        rule = query.order_by(AssignmentRule.id.asc()).first()
        if rule is None:
            continue
        assignee = rule.assignee
        if assignee is None or not assignee.is_active:
            logger.info("Assignment rule id=%s matched but assignee is inactive", rule.id)
            return None
        logger.debug("Assignment rule id=%s -> user=%s", rule.id, assignee.id)
        return assignee
    return None


# ── Rule CRUD ────────────────────────────────────────────────────────────────


def _check_assignee(assignee_id) -> User:
    assignee = get_or_raise(User, assignee_id, field="assigneeId")
    if assignee.role not in ASSIGNABLE_ROLES:
        raise ValidationError(
            "assignee must be a TECHNICIAN, MANAGER or ADMIN",
            details={"assigneeId": "invalid role"},
        )
    return assignee


def _check_priority(priority):
    if priority in (None, ""):
        return None
    priority = str(priority).upper()
    if priority not in PRIORITIES:
        raise ValidationError(f"Invalid priority: {priority}", details={"priority": "invalid"})
    return priority


def list_rules(hotel_id: int | None = None) -> list[AssignmentRule]:
    query = AssignmentRule.query_for_hotel(hotel_id) if hotel_id else AssignmentRule.query
    return query.order_by(AssignmentRule.created_at.desc(), AssignmentRule.id.desc()).all()


def _check_active(value) -> bool:
    if not isinstance(value, bool):
        raise ValidationError("isActive must be a boolean", details={"isActive": "invalid"})
    return value


def create_rule(data: dict) -> AssignmentRule:
    require_fields(data, "name", "hotelId", "category", "assigneeId", text=("name", "category"))
    hotel = get_or_raise(Hotel, data["hotelId"], field="hotelId")
    assignee = _check_assignee(data["assigneeId"])
    location_id = data.get("locationId")
    if location_id is not None:
        location_id = get_or_raise(Location, location_id, field="locationId").id

    rule = AssignmentRule(
        name=data["name"].strip(),
        description=optional_text(data, "description"),
        hotel_id=hotel.id,
        category=data["category"].strip(),
        priority=_check_priority(data.get("priority")),
        location_id=location_id,
        assignee_id=assignee.id,
        is_active=_check_active(data.get("isActive", True)),
    )
    db.session.add(rule)
    commit_or_raise("create assignment rule", "AssignmentRule")
    logger.info("Assignment rule created id=%s hotel=%s assignee=%s", rule.id, hotel.id, assignee.id)
    return rule


def update_rule(rule_id: int, data: dict) -> AssignmentRule:
    """Partial update; only keys present in data are applied."""
    rule = get_or_raise(AssignmentRule, rule_id)
    require_fields(data, *(f for f in ("name", "category") if f in data), text=("name", "category"))

    if "name" in data:
        rule.name = data["name"].strip()
    if "description" in data:
        rule.description = optional_text(data, "description")
    if "category" in data:
        rule.category = data["category"].strip()
    if "priority" in data:
        rule.priority = _check_priority(data["priority"])
    if "locationId" in data:
        location_id = data["locationId"]
        if location_id is not None:
            location_id = get_or_raise(Location, location_id, field="locationId").id
        rule.location_id = location_id
    if "assigneeId" in data:
        rule.assignee_id = _check_assignee(data["assigneeId"]).id
    if "isActive" in data:
        rule.is_active = _check_active(data["isActive"])

    commit_or_raise("update assignment rule", "AssignmentRule")
    logger.info("Assignment rule updated id=%s", rule.id)
    return rule


def delete_rule(rule_id: int) -> None:
    rule = get_or_raise(AssignmentRule, rule_id)
    db.session.delete(rule)
    commit_or_raise("delete assignment rule", "AssignmentRule")
    logger.info("Assignment rule deleted id=%s", rule_id)

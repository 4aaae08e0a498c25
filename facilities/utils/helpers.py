"""Shared service-layer helpers.

get_or_raise:     primary-key lookup that raises NotFoundError
to_id:            coerce a request-supplied id to int, ValidationError otherwise
require_fields:   collect missing / mistyped required body fields into one ValidationError
optional_text:    read an optional free-text body field
parse_datetime:   ISO-8601 / DD.MM.YYYY → aware UTC datetime, ValidationError on bad input
commit_or_raise:  commit the session, translating driver errors to platform exceptions
"""
import logging
from datetime import date, datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from facilities.core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from facilities.models import db

logger = logging.getLogger(__name__)


def to_id(value, field="id") -> int:
    """Return ``value`` as an integer primary key.

    Accepts ints, integral floats and digit strings. Booleans, objects,
    lists and anything else raise ValidationError({field: "invalid"}).
    """
    if isinstance(value, bool):
        pass
    elif isinstance(value, int):
        return value
    elif isinstance(value, float) and value.is_integer():
        return int(value)
    elif isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"{field} must be an integer id", details={field: "invalid"})


def get_or_raise(model, pk, label=None, field="id"):
    """Fetch a model instance by primary key or raise NotFoundError.

    ``field`` names the body/query key the id came from, for the
    ValidationError raised when it is not an integer.
    """
    label = label or model.__name__
    if pk is None:
        raise NotFoundError(resource=label, resource_id=pk)
    pk = to_id(pk, field)
    obj = db.session.get(model, pk)
    if obj is None:
        raise NotFoundError(resource=label, resource_id=pk)
    return obj


def require_fields(data: dict, *fields: str, text=()) -> None:
    """Raise one ValidationError naming every absent/blank field.

    Fields also listed in ``text`` must be strings; other types are
    reported as "invalid".
    """
    problems = {}
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            problems[field] = "required"
        elif field in text and not isinstance(value, str):
            problems[field] = "invalid"
    if not problems:
        return
    missing = [f for f, problem in problems.items() if problem == "required"]
    if missing:
        message = f"Missing required fields: {', '.join(missing)}"
    else:
        message = f"Fields must be text: {', '.join(problems)}"
    raise ValidationError(message, details=problems)


def optional_text(data: dict, field: str, default=""):
    value = data.get(field)
    if value in (None, ""):
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text", details={field: "invalid"})
    return value


def parse_datetime(value, field="date"):
    """Parse an ISO date/datetime (or DD.MM.YYYY) into an aware UTC datetime.

    Returns None for empty input. Naive values are taken as UTC.

    Raises:
        ValidationError: If the value cannot be parsed.
    """
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = datetime.strptime(text, "%d.%m.%Y")
            except ValueError as exc:
                raise ValidationError(
                    f"Invalid {field}. Use ISO-8601 (YYYY-MM-DD) or DD.MM.YYYY.",
                    details={field: "invalid date"},
                ) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# ── Database commit helper ───────────────────────────────────────────────────

def commit_or_raise(operation: str, resource: str = "Record"):
    """Commit the current SQLAlchemy session, raising a platform exception on failure.

    IntegrityError   → ConflictError   (duplicate / constraint violation)
    SQLAlchemyError  → PersistenceError (connection / lock / driver issues)

    The session is rolled back before raising, so nothing from the failed
    unit of work is left half-applied.
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error during %s: %s", operation, exc.orig)
        raise ConflictError(resource) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Database error during %s", operation)
        raise PersistenceError(operation) from exc

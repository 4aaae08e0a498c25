"""
HotelScopedModel — abstract base for tables that belong to one hotel.

Adds:
  - hotel_id FK column with index
  - query_for_hotel(hotel_id) classmethod
  - created_at / updated_at timestamps (timezone-aware UTC)
"""

from datetime import datetime, timezone

from sqlalchemy.orm import declared_attr

from facilities.models import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def iso(value: datetime | None) -> str | None:
    value = as_utc(value)
    return value.isoformat() if value else None


class TimestampMixin:
    """created_at / updated_at columns shared by every mutable table."""

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class HotelScopedModel(TimestampMixin, db.Model):
    """Abstract base for hotel-scoped tables."""
    __abstract__ = True

    @declared_attr
    def hotel_id(cls):
        return db.Column(
            db.Integer,
            db.ForeignKey("hotels.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @classmethod
    def query_for_hotel(cls, hotel_id):
        """Return a query filtered by hotel_id."""
        return cls.query.filter_by(hotel_id=hotel_id)

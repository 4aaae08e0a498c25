"""Location lookup for pickers: active locations with their sub-locations."""

from __future__ import annotations

from sqlalchemy import or_

from facilities.models.hotel import Location

CHILD_DEPTH = 2


def list_locations(hotel_id: int | None = None, search: str | None = None) -> list[dict]:
    """Active locations ordered by type then name, children two levels deep."""
    query = Location.query.filter(Location.is_active.is_(True))
    if hotel_id:
        query = query.filter(Location.hotel_id == hotel_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Location.name.ilike(pattern), Location.type.ilike(pattern)))
    locations = query.order_by(Location.type.asc(), Location.name.asc()).all()
    return [loc.to_dict(depth=CHILD_DEPTH) for loc in locations]

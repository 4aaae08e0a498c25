"""Asset registry service: equipment records and their QR labels.

QR codes have the form ``ASSET-<epoch milliseconds>-<9 base36 characters>``
and are unique across all assets.
"""

from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime
from decimal import Decimal, InvalidOperation
from io import BytesIO

import qrcode
from sqlalchemy import func

from facilities.core.exceptions import ValidationError
from facilities.models import db
from facilities.models.asset import ASSET_CONDITIONS, ASSET_STATUSES, Asset
from facilities.models.base import as_utc, utcnow
from facilities.models.hotel import Location
from facilities.models.work_order import WorkOrder
from facilities.utils.helpers import (
    commit_or_raise,
    get_or_raise,
    optional_text,
    parse_datetime,
    require_fields,
)

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_uppercase
_DAYS_PER_MONTH = 30


def new_qr_code(now: datetime | None = None) -> str:
    now = now or utcnow()
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"ASSET-{int(now.timestamp() * 1000)}-{suffix}"


def age_in_months(purchase_date: datetime, now: datetime) -> int:
    """Whole 30-day months since purchase."""
    return (now - as_utc(purchase_date)).days // _DAYS_PER_MONTH


def asset_summary(asset: Asset, now: datetime | None = None) -> dict:
    """Asset dict plus currentAge and lastMaintenance."""
    now = now or utcnow()
    last = (
        db.session.query(func.max(WorkOrder.created_at))
        .filter(WorkOrder.asset_id == asset.id)
        .scalar()
    )
    data = asset.to_dict()
    data["currentAge"] = age_in_months(asset.purchase_date, now)
    data["lastMaintenance"] = as_utc(last).isoformat() if last else None
    return data


def list_assets(now: datetime | None = None) -> list[dict]:
    now = now or utcnow()
    return [asset_summary(a, now) for a in Asset.query.order_by(Asset.name.asc(), Asset.id.asc()).all()]


def _parse_cost(value):
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError("cost must be a number", details={"cost": "invalid"}) from exc


def create_asset(data: dict) -> Asset:
    """Register an asset with a fresh QR code.

    New assets start OPERATIONAL / EXCELLENT with purchaseDate = now.
    """
    require_fields(data, "name", "category", "locationId", text=("name", "category"))
    location = get_or_raise(Location, data["locationId"], field="locationId")

    lifespan = data.get("expectedLifespan")
    if lifespan is not None:
        try:
            lifespan = int(lifespan)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                "expectedLifespan must be a whole number of months",
                details={"expectedLifespan": "invalid"},
            ) from exc

    asset = Asset(
        name=data["name"].strip(),
        description=optional_text(data, "description"),
        category=data["category"],
        location_id=location.id,
        hotel_id=location.hotel_id,
        qr_code=new_qr_code(),
        status="OPERATIONAL",
        condition="EXCELLENT",
        purchase_date=utcnow(),
        warranty_expiry=parse_datetime(data.get("warrantyExpiry"), "warrantyExpiry"),
        expected_lifespan=lifespan,
        manufacturer=optional_text(data, "manufacturer", None),
        model=optional_text(data, "model", None),
        serial_number=optional_text(data, "serialNumber", None),
        cost=_parse_cost(data.get("cost")),
    )
    db.session.add(asset)
    commit_or_raise("create asset", "Asset")
    logger.info("Asset created id=%s qr=%s location=%s", asset.id, asset.qr_code, location.id)
    return asset


def update_asset(asset_id: int, data: dict) -> Asset:
    asset = get_or_raise(Asset, asset_id)
    if data.get("status"):
        status = str(data["status"]).upper()
        if status not in ASSET_STATUSES:
            raise ValidationError(f"Invalid status: {status}", details={"status": "invalid"})
        asset.status = status
    if data.get("condition"):
        condition = str(data["condition"]).upper()
        if condition not in ASSET_CONDITIONS:
            raise ValidationError(f"Invalid condition: {condition}", details={"condition": "invalid"})
        asset.condition = condition
    commit_or_raise("update asset", "Asset")
    logger.info("Asset updated id=%s status=%s condition=%s", asset.id, asset.status, asset.condition)
    return asset


def regenerate_qr(asset_id: int) -> Asset:
    asset = get_or_raise(Asset, asset_id)
    previous = asset.qr_code
    asset.qr_code = new_qr_code()
    commit_or_raise("regenerate asset QR code", "Asset")
    logger.info("Asset QR regenerated id=%s %s -> %s", asset.id, previous, asset.qr_code)
    return asset


def qr_png(asset_id: int) -> bytes:
    """Render the asset's QR code as PNG bytes."""
    asset = get_or_raise(Asset, asset_id)
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(asset.qr_code)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()

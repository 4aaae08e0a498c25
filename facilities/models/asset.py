"""
Hotel Facilities Platform
Asset Registry model.

Physical equipment (boilers, chillers, lifts, extinguishers...) tracked with a
QR label so technicians can scan straight into its history.
"""

from facilities.models import db
from facilities.models.base import TimestampMixin, iso, utcnow


# ── Constants ────────────────────────────────────────────────────────────────

ASSET_STATUSES = frozenset({"OPERATIONAL", "NEEDS_MAINTENANCE", "UNDER_REPAIR", "RETIRED"})
ASSET_CONDITIONS = frozenset({"EXCELLENT", "GOOD", "FAIR", "POOR"})


class Asset(TimestampMixin, db.Model):
    __tablename__ = "assets"

    id = db.Column(db.Integer, primary_key=True)
    hotel_id = db.Column(
        db.Integer, db.ForeignKey("hotels.id", ondelete="CASCADE"), nullable=True, index=True,
    )
    location_id = db.Column(
        db.Integer, db.ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default="")
    category = db.Column(db.String(100), nullable=False)
    qr_code = db.Column(db.String(64), unique=True, nullable=False)
    status = db.Column(db.String(30), nullable=False, default="OPERATIONAL")
    condition = db.Column(db.String(20), nullable=False, default="EXCELLENT")

    purchase_date = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    warranty_expiry = db.Column(db.DateTime(timezone=True), nullable=True)
    expected_lifespan = db.Column(db.Integer, nullable=True, comment="Months")

    manufacturer = db.Column(db.String(200))
    model = db.Column(db.String(200))
    serial_number = db.Column(db.String(200))
    cost = db.Column(db.Numeric(12, 2), nullable=True)

    location = db.relationship("Location")

    def to_summary(self):
        return {"id": self.id, "name": self.name, "qrCode": self.qr_code}

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "locationId": self.location_id,
            "location": self.location.name if self.location else None,
            "hotelId": self.hotel_id,
            "qrCode": self.qr_code,
            "status": self.status,
            "condition": self.condition,
            "purchaseDate": iso(self.purchase_date),
            "warrantyExpiry": iso(self.warranty_expiry),
            "expectedLifespan": self.expected_lifespan,
            "manufacturer": self.manufacturer,
            "model": self.model,
            "serialNumber": self.serial_number,
            "cost": float(self.cost) if self.cost is not None else None,
        }

    def __repr__(self):
        return f"<Asset {self.id}: {self.name} [{self.qr_code}]>"

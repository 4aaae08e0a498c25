"""
Hotel Facilities Platform
Property & people models.

Models:
    - Hotel:    one managed property
    - User:     local mirror of identity-provider accounts (role + hotel)
    - Location: room / floor / plant area, nested through parent_id

Users are provisioned by the external identity provider; this service never
stores credentials.
"""

from facilities.models import db
from facilities.models.base import HotelScopedModel, TimestampMixin, iso


# ── Constants ────────────────────────────────────────────────────────────────

USER_ROLES = ("STAFF", "TECHNICIAN", "MANAGER", "ADMIN")

# Role hierarchy: ADMIN > MANAGER > TECHNICIAN > STAFF
ROLE_RANK = {role: rank for rank, role in enumerate(USER_ROLES)}


class Hotel(TimestampMixin, db.Model):
    __tablename__ = "hotels"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    address = db.Column(db.String(500))
    phone = db.Column(db.String(50))
    email = db.Column(db.String(255))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "isActive": self.is_active,
            "createdAt": iso(self.created_at),
        }

    def __repr__(self):
        return f"<Hotel {self.id}: {self.name}>"


class User(TimestampMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    hotel_id = db.Column(
        db.Integer, db.ForeignKey("hotels.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    role = db.Column(db.String(20), nullable=False, default="STAFF",
                     comment="STAFF | TECHNICIAN | MANAGER | ADMIN")
    employee_id = db.Column(db.String(50), unique=True, nullable=True,
                            comment="External staff number used by compliance records")
    phone = db.Column(db.String(50))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    hotel = db.relationship("Hotel")

    def to_summary(self):
        """Compact form embedded in other resources."""
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}

    def to_dict(self):
        return {
            **self.to_summary(),
            "employeeId": self.employee_id,
            "phone": self.phone,
            "isActive": self.is_active,
            "hotelId": self.hotel_id,
        }

    def __repr__(self):
        return f"<User {self.id}: {self.email} [{self.role}]>"


class Location(HotelScopedModel):
    __tablename__ = "locations"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(50), nullable=False, default="ROOM",
                     comment="BUILDING | FLOOR | ROOM | AREA | PLANT")
    parent_id = db.Column(
        db.Integer, db.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    qr_code = db.Column(db.String(100), unique=True, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    parent = db.relationship("Location", remote_side=[id], back_populates="children")
    children = db.relationship("Location", back_populates="parent", order_by="Location.name")

    def to_dict(self, depth=0):
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "parentId": self.parent_id,
            "hotelId": self.hotel_id,
            "qrCode": self.qr_code,
            "isActive": self.is_active,
        }
        if depth > 0:
            data["children"] = [c.to_dict(depth - 1) for c in self.children if c.is_active]
        return data

    def __repr__(self):
        return f"<Location {self.id}: {self.name}>"

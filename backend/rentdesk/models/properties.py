from __future__ import annotations

from ..extensions import db
from rentdesk.time_utils import to_iso_date, to_utc_z, utcnow


def _money(value) -> str | None:
    if value is None:
        return None
    return f"{value:.2f}"


class Shop(db.Model):
    """
    A shop rental property.

    `status` is one of occupied, vacant, maintenance, reserved. It is stored
    as given; there is no transition state machine.
    Bill shares are percentages (0-100) of the building water/electricity
    bills allocated to this shop.
    """
    __tablename__ = "shops"
    __table_args__ = (
        db.Index("ix_shops_tenant_name", "tenant_name"),
        db.Index("ix_shops_status", "status"),
        db.Index("ix_shops_lease_dates", "lease_start_date", "lease_end_date"),
        db.CheckConstraint("rent_due_day BETWEEN 1 AND 31", name="ck_shops_rent_due_day"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    shop_number = db.Column(db.String(32), nullable=False, unique=True)
    name = db.Column(db.String(120), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    # Square feet/meters
    area = db.Column(db.Float, nullable=True)

    rent_amount = db.Column(db.Numeric(10, 2), nullable=False)
    security_deposit = db.Column(db.Numeric(10, 2), nullable=True)

    tenant_name = db.Column(db.String(120), nullable=False)
    tenant_contact = db.Column(db.String(120), nullable=False)

    lease_start_date = db.Column(db.Date, nullable=False)
    lease_end_date = db.Column(db.Date, nullable=True)
    rent_due_day = db.Column(db.Integer, nullable=False, default=1)

    status = db.Column(db.String(16), nullable=False, default="occupied")
    notes = db.Column(db.Text, nullable=True)

    include_in_water_bill = db.Column(db.Boolean, nullable=False, default=False)
    include_in_current_bill = db.Column(db.Boolean, nullable=False, default=False)
    water_bill_share = db.Column(db.Float, nullable=True, default=0)
    current_bill_share = db.Column(db.Float, nullable=True, default=0)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    updated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    creator = db.relationship("User", foreign_keys=[created_by])
    updater = db.relationship("User", foreign_keys=[updated_by])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_number": self.shop_number,
            "name": self.name,
            "location": self.location,
            "area": self.area,
            "rent_amount": _money(self.rent_amount),
            "security_deposit": _money(self.security_deposit),
            "tenant_name": self.tenant_name,
            "tenant_contact": self.tenant_contact,
            "lease_start_date": to_iso_date(self.lease_start_date),
            "lease_end_date": to_iso_date(self.lease_end_date),
            "rent_due_day": self.rent_due_day,
            "status": self.status,
            "notes": self.notes,
            "include_in_water_bill": self.include_in_water_bill,
            "include_in_current_bill": self.include_in_current_bill,
            "water_bill_share": self.water_bill_share,
            "current_bill_share": self.current_bill_share,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

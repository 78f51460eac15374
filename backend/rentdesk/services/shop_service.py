from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from rentdesk.extensions import db
from rentdesk.errors import ConflictError, NotFoundError, ValidationError
from rentdesk.models import Shop
from rentdesk.validation import (
    SHOP_STATUSES,
    ModelValidationPolicy,
    enforce_rules_shop,
    validate_payload,
)


SHOP_POLICY = ModelValidationPolicy(
    writable_fields={
        "shop_number", "name", "location", "area",
        "rent_amount", "security_deposit",
        "tenant_name", "tenant_contact",
        "lease_start_date", "lease_end_date", "rent_due_day",
        "status", "notes",
        "include_in_water_bill", "include_in_current_bill",
        "water_bill_share", "current_bill_share",
    },
    required_on_create={
        "shop_number", "name", "location", "rent_amount",
        "tenant_name", "tenant_contact", "lease_start_date",
    },
)


def _ensure_unique_number(shop_number: str, exclude_id: int | None = None) -> None:
    query = db.session.query(Shop).filter(Shop.shop_number == shop_number)
    if exclude_id is not None:
        query = query.filter(Shop.id != exclude_id)
    if query.first():
        raise ConflictError(f"Shop number {shop_number} already exists")


def _commit_unique(shop_number: str) -> None:
    """Commit; a concurrent insert of the same number surfaces as ConflictError."""
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Shop number {shop_number} already exists")


def create_shop(payload: dict, *, user_id: int) -> Shop:
    patch = validate_payload(model=Shop, payload=payload, policy=SHOP_POLICY, partial=False)
    enforce_rules_shop(patch)
    _ensure_unique_number(patch["shop_number"])

    shop = Shop(**patch)
    shop.created_by = user_id
    shop.updated_by = user_id

    db.session.add(shop)
    _commit_unique(patch["shop_number"])
    return shop


def get_shop(shop_id: int) -> Shop | None:
    return db.session.get(Shop, shop_id)


def require_shop(shop_id: int) -> Shop:
    shop = get_shop(shop_id)
    if not shop:
        raise NotFoundError("Shop not found")
    return shop


def list_shops(*, status: str | None = None, search: str | None = None) -> list[Shop]:
    query = db.session.query(Shop)
    if status:
        if status not in SHOP_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(SHOP_STATUSES)}")
        query = query.filter(Shop.status == status)
    if search:
        like = f"%{search.strip()}%"
        query = query.filter(
            db.or_(
                Shop.shop_number.ilike(like),
                Shop.name.ilike(like),
                Shop.tenant_name.ilike(like),
            )
        )
    return query.order_by(Shop.shop_number.asc()).all()


def update_shop(shop_id: int, payload: dict, *, user_id: int) -> Shop:
    shop = require_shop(shop_id)
    patch = validate_payload(model=Shop, payload=payload, policy=SHOP_POLICY, partial=True)
    enforce_rules_shop(patch, current=shop)

    if "shop_number" in patch and patch["shop_number"] != shop.shop_number:
        _ensure_unique_number(patch["shop_number"], exclude_id=shop.id)

    for key, value in patch.items():
        setattr(shop, key, value)
    shop.updated_by = user_id

    _commit_unique(shop.shop_number)
    return shop


def set_shop_status(shop_id: int, status: str, *, user_id: int) -> Shop:
    if status not in SHOP_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(SHOP_STATUSES)}")
    shop = require_shop(shop_id)
    shop.status = status
    shop.updated_by = user_id
    db.session.commit()
    return shop

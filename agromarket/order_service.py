# agromarket/order_service.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, FrozenSet, List, Optional

from sqlalchemy.orm import Session

from agromarket import crud, models, schemas
from agromarket.config import get_settings
from agromarket.errors import (
    Conflict,
    InsufficientQuantity,
    InvalidTransition,
    NotAuthorized,
    PriceMismatch,
    ValidationFailed,
)
from agromarket.permissions import require_farmer_owner, require_found, require_principal, require_role
from agromarket.utils import amounts_match, get_logger, round2, to_aware_utc

Clock = Callable[[], datetime]

logger = get_logger(__name__)

# forward-only; delivered and cancelled are terminal
TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"shipped", "cancelled"}),
    "shipped": frozenset({"delivered"}),
    "delivered": frozenset(),
    "cancelled": frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return current == target or target in TRANSITIONS.get(current, frozenset())


class OrderService:
    def __init__(self, *, clock: Clock | None = None, price_tolerance: float | None = None):
        # DI
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._tolerance = get_settings().PRICE_TOLERANCE if price_tolerance is None else price_tolerance

    def create_order(
        self,
        db: Session,
        principal: Optional[models.User],
        crop_id: str,
        quantity: float,
        total_price: float,
        delivery_address: str,
    ) -> str:
        """
        Place an order against a published crop.

        The client total is untrusted: it must match quantity * price_per_unit
        within the configured tolerance, and the stored total is recomputed.
        The crop's order counter is bumped in the same transaction.
        """
        user = require_role(principal, "customer")
        crop = require_found(crud.get_crop(db, crop_id), "Crop", crop_id)

        if not crop.published:
            raise Conflict("Crop is not available for ordering", {"id": crop_id})
        if quantity <= 0:
            raise ValidationFailed("Quantity must be greater than zero", {"quantity": quantity})
        if quantity > crop.quantity:
            logger.warning("order for %s %s of crop %s exceeds stock %s", quantity, crop.unit, crop_id, crop.quantity)
            raise InsufficientQuantity(
                "Insufficient quantity available",
                {"requested": quantity, "available": crop.quantity, "unit": crop.unit},
            )

        expected = round2(quantity * crop.price_per_unit)
        if not amounts_match(expected, total_price, self._tolerance):
            logger.warning("price mismatch on crop %s: expected %s, got %s", crop_id, expected, total_price)
            raise PriceMismatch(
                "Total price does not match quantity and unit price",
                {"expected": expected, "given": total_price},
            )

        obj = crud.insert_order(
            db,
            {
                "customer_id": user.id,
                "customer_name": user.name or "Anonymous Customer",
                "customer_email": user.email or "",
                "farmer_id": crop.farmer_id,
                "farmer_name": crop.farmer_name,
                "crop_id": crop.id,
                "crop_name": crop.name,
                "crop_image": crop.image_url,
                "quantity": quantity,
                "price_per_unit": crop.price_per_unit,
                "total_price": expected,
                "delivery_address": delivery_address,
                "status": "pending",
                "created_at": to_aware_utc(self._clock()),
            },
        )
        crud.increment_crop_counter(db, crop.id, "orders")
        db.commit()
        logger.info("order %s placed by %s on crop %s", obj.id, user.id, crop_id)
        return obj.id

    def get_customer_orders(self, db: Session, principal: Optional[models.User]) -> List[models.Order]:
        if principal is None:
            return []
        return crud.orders_by_customer(db, principal.id)

    def get_farmer_orders(self, db: Session, principal: Optional[models.User]) -> List[models.Order]:
        if principal is None:
            return []
        return crud.orders_by_farmer(db, principal.id)

    def get_order(self, db: Session, principal: Optional[models.User], order_id: str) -> models.Order:
        user = require_principal(principal)
        order = require_found(crud.get_order(db, order_id), "Order", order_id)
        if user.id not in (order.customer_id, order.farmer_id):
            raise NotAuthorized("Not authorized", {"id": order_id})
        return order

    def update_order_status(
        self,
        db: Session,
        principal: Optional[models.User],
        order_id: str,
        status: str,
    ) -> models.Order:
        user = require_principal(principal)
        order = require_found(crud.get_order(db, order_id), "Order", order_id)
        try:
            require_farmer_owner(order, user)
        except NotAuthorized:
            logger.warning("user %s denied status change on order %s", user.id, order_id)
            raise

        if status not in TRANSITIONS:
            raise ValidationFailed(f"Unknown order status {status!r}")
        if not can_transition(order.status, status):
            raise InvalidTransition(
                f"Cannot move order from {order.status} to {status}",
                {"from": order.status, "to": status, "allowed": sorted(TRANSITIONS[order.status])},
            )
        if order.status == status:
            return order

        previous = order.status
        order.status = status
        db.commit()
        logger.info("order %s: %s -> %s", order_id, previous, status)
        return order

    def customer_stats(self, db: Session, principal: Optional[models.User]) -> schemas.CustomerStats:
        if principal is None:
            return schemas.CustomerStats()
        orders = crud.orders_by_customer(db, principal.id)
        return schemas.CustomerStats(
            total_orders=len(orders),
            pending_orders=sum(1 for o in orders if o.status == "pending"),
            total_spent=round2(sum(o.total_price for o in orders)) or 0.0,
        )

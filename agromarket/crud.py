from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from agromarket import models

ACTIVE_ORDER_STATUSES = ("pending", "confirmed", "shipped")

# ---------- store primitives ----------
# Helpers stage changes on the session; callers own the commit so that
# multi-row mutations land in one transaction.

def get_user(db: Session, user_id: Optional[str]) -> Optional[models.User]:
    if not user_id:
        return None
    return db.get(models.User, user_id)

def insert_user(db: Session, *, name: Optional[str], email: Optional[str]) -> models.User:
    obj = models.User(name=name, email=email)
    db.add(obj)
    db.flush()
    return obj

def get_crop(db: Session, crop_id: str) -> Optional[models.Crop]:
    return db.get(models.Crop, crop_id)

def insert_crop(db: Session, fields: Dict[str, Any]) -> models.Crop:
    obj = models.Crop(**fields)
    db.add(obj)
    db.flush()
    return obj

def patch(obj, fields: Dict[str, Any]) -> None:
    for key, value in fields.items():
        setattr(obj, key, value)

def delete(db: Session, obj) -> None:
    db.delete(obj)
    db.flush()

def get_order(db: Session, order_id: str) -> Optional[models.Order]:
    return db.get(models.Order, order_id)

def insert_order(db: Session, fields: Dict[str, Any]) -> models.Order:
    obj = models.Order(**fields)
    db.add(obj)
    db.flush()
    return obj

# ---------- indexed lookups ----------

def crops_by_farmer(db: Session, farmer_id: str) -> List[models.Crop]:
    return (
        db.query(models.Crop)
        .filter(models.Crop.farmer_id == farmer_id)
        .order_by(models.Crop.created_at)
        .all()
    )

def published_crops(db: Session) -> List[models.Crop]:
    return (
        db.query(models.Crop)
        .filter(models.Crop.published.is_(True))
        .order_by(models.Crop.created_at)
        .all()
    )

def orders_by_customer(db: Session, customer_id: str) -> List[models.Order]:
    return (
        db.query(models.Order)
        .filter(models.Order.customer_id == customer_id)
        .order_by(models.Order.created_at)
        .all()
    )

def orders_by_farmer(db: Session, farmer_id: str) -> List[models.Order]:
    return (
        db.query(models.Order)
        .filter(models.Order.farmer_id == farmer_id)
        .order_by(models.Order.created_at)
        .all()
    )

def count_active_orders_for_crop(db: Session, crop_id: str) -> int:
    return (
        db.query(models.Order)
        .filter(models.Order.crop_id == crop_id)
        .filter(models.Order.status.in_(ACTIVE_ORDER_STATUSES))
        .count()
    )

# ---------- counters ----------

def increment_crop_counter(db: Session, crop_id: str, column: str) -> bool:
    """
    Single UPDATE ... SET col = col + 1, so concurrent callers never lose an increment.
    Returns False when no crop row matched.
    """
    if column not in ("views", "orders"):
        raise ValueError(f"Unknown crop counter: {column}")
    counter = getattr(models.Crop, column)
    res = db.execute(
        update(models.Crop)
        .where(models.Crop.id == crop_id)
        .values({column: counter + 1})
        .execution_options(synchronize_session=False)
    )
    return res.rowcount > 0

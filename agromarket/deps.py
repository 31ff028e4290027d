# agromarket/deps.py
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from agromarket import crud, models
from agromarket.crop_service import CropService
from agromarket.db import get_db
from agromarket.order_service import OrderService

_crop_service = CropService()
_order_service = OrderService()


def get_principal(
    x_user_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> Optional[models.User]:
    """Resolve the caller from the auth provider's user id; None means anonymous."""
    return crud.get_user(db, x_user_id)


def get_crop_service() -> CropService:
    return _crop_service


def get_order_service() -> OrderService:
    return _order_service

# agromarket/user_service.py
from typing import Optional, get_args

from sqlalchemy.orm import Session

from agromarket import crud, models, schemas
from agromarket.errors import Conflict, ValidationFailed
from agromarket.permissions import require_principal
from agromarket.utils import get_logger

logger = get_logger(__name__)

ROLES = frozenset(get_args(schemas.Role))


def register_user(db: Session, *, name: Optional[str] = None, email: Optional[str] = None) -> models.User:
    # stands in for the auth provider creating the account
    obj = crud.insert_user(db, name=name, email=email)
    db.commit()
    db.refresh(obj)
    logger.info("registered user %s", obj.id)
    return obj


def get_current_user(principal: Optional[models.User]) -> Optional[models.User]:
    return principal


def set_user_role(db: Session, principal: Optional[models.User], role: str) -> models.User:
    """Role is chosen once; picking the same role again is a no-op."""
    user = require_principal(principal)
    if role not in ROLES:
        raise ValidationFailed(f"Unknown role {role!r}", {"allowed": sorted(ROLES)})
    if user.role == role:
        return user
    if user.role is not None:
        raise Conflict(
            "Role has already been selected",
            {"current": user.role, "requested": role},
        )
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("user %s selected role %s", user.id, role)
    return user

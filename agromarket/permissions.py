# agromarket/permissions.py
from typing import Optional

from agromarket import models
from agromarket.errors import NotAuthenticated, NotAuthorized, NotFound


def require_principal(principal: Optional[models.User]) -> models.User:
    if principal is None:
        raise NotAuthenticated("Not authenticated")
    return principal


def require_role(principal: Optional[models.User], *roles: str) -> models.User:
    user = require_principal(principal)
    if user.role not in roles:
        raise NotAuthorized(
            f"Role {user.role or 'unset'!r} may not perform this action",
            {"required": list(roles)},
        )
    return user


def require_found(obj, kind: str, obj_id: str):
    if obj is None:
        raise NotFound(f"{kind} not found", {"id": obj_id})
    return obj


def require_farmer_owner(obj, principal: models.User):
    """obj is anything carrying a farmer_id (crop or order)."""
    if obj.farmer_id != principal.id:
        raise NotAuthorized("Not authorized", {"id": obj.id})
    return obj

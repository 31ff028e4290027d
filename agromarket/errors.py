# agromarket/errors.py
from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    """Base exception for marketplace operations"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotAuthenticated(MarketplaceError):
    """Raised when no principal could be resolved"""
    status_code = 401


class NotAuthorized(MarketplaceError):
    """Raised when the principal is not allowed to touch the resource"""
    status_code = 403


class NotFound(MarketplaceError):
    """Raised when a referenced record does not exist"""
    status_code = 404


class Conflict(MarketplaceError):
    """Raised when the request clashes with the current state of a record"""
    status_code = 409


class InvalidTransition(Conflict):
    """Raised when an order status change is not allowed from its current status"""
    pass


class ValidationFailed(MarketplaceError):
    status_code = 422


class InsufficientQuantity(ValidationFailed):
    """Raised when an order asks for more than the crop has available"""
    pass


class PriceMismatch(ValidationFailed):
    """Raised when the client total does not match quantity * price_per_unit"""
    pass

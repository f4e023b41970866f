"""
Lifecycle error classifications for crowdfunding operations.

These exceptions are raised to the caller when an entry point is rejected.
No state is written by a call that raises one of them.
"""

from typing import Optional, Dict, Any


class CrowdfundError(Exception):
    """Base class for rejected lifecycle operations."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 product_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.product_id = product_id
        self.recoverable = True


class AuthorizationError(CrowdfundError):
    """Caller identity is not authenticated or does not match."""

    def __init__(self, message: str, identity: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.identity = identity


class NotFoundError(CrowdfundError):
    """Requested entity does not exist."""

    def __init__(self, message: str, entity: Optional[str] = None,
                 key: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.entity = entity
        self.key = key


class ProductNotFoundError(NotFoundError):
    """No product is stored under the requested id."""

    def __init__(self, message: str = "Product not found", **kwargs):
        kwargs.setdefault("entity", "product")
        if "key" not in kwargs:
            kwargs["key"] = kwargs.get("product_id")
        super().__init__(message, **kwargs)


class ValidationError(CrowdfundError):
    """Input value is out of range (amounts, goal, deadline)."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class StateError(CrowdfundError):
    """Product status does not allow the requested operation."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class BusinessRuleError(CrowdfundError):
    """Operation breaks a funding or reward rule."""

    def __init__(self, message: str, rule: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.rule = rule

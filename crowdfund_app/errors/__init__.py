"""
Error classification system for the crowdfunding lifecycle engine.

This module provides the structured exception hierarchy raised by the engine:
caller-facing rule violations and infrastructure failures.
"""

from .lifecycle import (
    CrowdfundError,
    AuthorizationError,
    NotFoundError,
    ProductNotFoundError,
    ValidationError,
    StateError,
    BusinessRuleError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    PaymentError,
    ConfigurationError,
)

__all__ = [
    # Lifecycle Errors
    "CrowdfundError",
    "AuthorizationError",
    "NotFoundError",
    "ProductNotFoundError",
    "ValidationError",
    "StateError",
    "BusinessRuleError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "PaymentError",
    "ConfigurationError",
]

"""
Collaborator services used by the lifecycle engine.

Identity/auth, clock, and payment gateway interfaces with the in-process
implementations the engine ships with.
"""
from .clock import Clock, ManualClock, SystemClock
from .identity import AllowAllAuthProvider, AuthProvider, SessionAuthProvider
from .payments import LedgerPaymentGateway, PaymentGateway

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "AuthProvider",
    "AllowAllAuthProvider",
    "SessionAuthProvider",
    "PaymentGateway",
    "LedgerPaymentGateway",
]

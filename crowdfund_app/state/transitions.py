"""
State transition handlers for crowdfunding product lifecycle.

This module provides clean orchestration of status changes with proper
validation and logging support.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ..errors import StateError
from ..logging.config import get_state_logger, log_state_transition
from .models import Product, ProductStatus

logger = structlog.get_logger(__name__)
state_logger = get_state_logger(__name__)


# from-state -> {to-state: entry point allowed to trigger it}
ALLOWED_TRANSITIONS: dict[ProductStatus, dict[ProductStatus, str]] = {
    ProductStatus.ACTIVE: {
        ProductStatus.FUNDED: "contribute",
        ProductStatus.FAILED: "refund_contributors",
    },
    ProductStatus.FUNDED: {
        ProductStatus.COMPLETED: "distribute_funds",
    },
    ProductStatus.COMPLETED: {},
    ProductStatus.FAILED: {},
}


@dataclass(frozen=True)
class StateTransition:
    """Represents a product status transition."""

    from_state: ProductStatus
    to_state: ProductStatus
    trigger: str
    timestamp: int


class StateTransitionHandler:
    """Handles product status transitions with logging and validation."""

    def __init__(self):
        self.logger = logger

    def can_transition(self, from_state: ProductStatus, to_state: ProductStatus,
                       trigger: Optional[str] = None) -> bool:
        """Check the allowed-transition table."""
        allowed_trigger = ALLOWED_TRANSITIONS.get(from_state, {}).get(to_state)
        if allowed_trigger is None:
            return False
        return trigger is None or trigger == allowed_trigger

    def validate_transition(self, product: Product, transition: StateTransition) -> None:
        """
        Validate that a transition is allowed for the product.

        Raises:
            StateError: If the product is not in the transition's source state,
                or the table does not allow the transition
        """
        if product.status != transition.from_state:
            raise StateError(
                f"Product is {product.status.value}, expected {transition.from_state.value}",
                current_state=product.status.value,
                attempted_transition=transition.to_state.value,
                product_id=product.id
            )

        if not self.can_transition(transition.from_state, transition.to_state, transition.trigger):
            raise StateError(
                f"Invalid state transition from {transition.from_state.value} "
                f"to {transition.to_state.value} via {transition.trigger}",
                current_state=product.status.value,
                attempted_transition=transition.to_state.value,
                product_id=product.id
            )

    def apply_transition(
        self,
        product: Product,
        to_state: ProductStatus,
        trigger: str,
        timestamp: int,
        context: Optional[dict[str, Any]] = None
    ) -> Product:
        """Validate and apply a transition, returning the updated product."""
        transition = StateTransition(
            from_state=product.status,
            to_state=to_state,
            trigger=trigger,
            timestamp=timestamp
        )
        self.validate_transition(product, transition)

        log_state_transition(
            state_logger,
            product_id=product.id,
            from_state=transition.from_state.value,
            to_state=transition.to_state.value,
            trigger=trigger,
            context={"timestamp": timestamp, "total_funded": product.total_funded, **(context or {})}
        )

        return product.with_status(to_state)


# Global transition handler instance
transition_handler = StateTransitionHandler()

"""
Funding, milestone and reward rules for the product lifecycle.

Every check here is pure: it reads the models handed to it and either
returns or raises. The engine runs all checks for a call before it writes
anything, so a raised error leaves the store untouched.
"""

from typing import Optional, Sequence

from ..errors import BusinessRuleError, CrowdfundError, StateError, ValidationError
from ..logging.config import get_rules_logger, log_rule_rejection
from .models import Contribution, Milestone, Product, ProductStatus, RewardTier

rules_logger = get_rules_logger(__name__)


def reject(error: CrowdfundError, rule: str) -> CrowdfundError:
    """Log a rejection and hand the error back for raising."""
    log_rule_rejection(
        rules_logger,
        rule=rule,
        product_id=error.product_id,
        reason=error.message,
        context=error.context or None
    )
    return error


def require_status(product: Product, status: ProductStatus, message: str) -> None:
    """Require the product to be in a given status."""
    if product.status != status:
        raise reject(StateError(
            message,
            current_state=product.status.value,
            product_id=product.id
        ), rule=f"status_{status.value}")


def check_creation(funding_goal: int, deadline: int, now: int) -> None:
    """Validate a new product's goal and deadline."""
    if funding_goal <= 0:
        raise reject(ValidationError(
            "Funding goal must be greater than zero",
            field="funding_goal",
            value=funding_goal
        ), rule="positive_goal")

    if deadline <= now:
        raise reject(ValidationError(
            "Deadline must be in the future",
            field="deadline",
            value=deadline,
            context={"now": now}
        ), rule="future_deadline")


def check_contribution(product: Product, amount: int, now: int) -> None:
    """Validate a contribution against product status, deadline and goal."""
    require_status(product, ProductStatus.ACTIVE, "Product is not active")

    if now >= product.deadline:
        raise reject(StateError(
            "Funding period has ended",
            current_state=product.status.value,
            product_id=product.id,
            context={"now": now, "deadline": product.deadline}
        ), rule="before_deadline")

    if amount <= 0:
        raise reject(ValidationError(
            "Contribution must be greater than zero",
            field="amount",
            value=amount,
            product_id=product.id
        ), rule="positive_amount")

    if product.total_funded + amount > product.funding_goal:
        raise reject(BusinessRuleError(
            "Contribution would exceed funding goal",
            rule="within_goal",
            product_id=product.id,
            context={
                "amount": amount,
                "total_funded": product.total_funded,
                "funding_goal": product.funding_goal,
            }
        ), rule="within_goal")


def reaches_goal(product: Product) -> bool:
    """True once the funded total matches the goal exactly."""
    return product.total_funded == product.funding_goal


def all_milestones_completed(milestones: Sequence[Milestone]) -> bool:
    """True when every milestone is completed; an empty list qualifies."""
    return all(milestone.completed for milestone in milestones)


def check_distribution(product: Product, milestones: Sequence[Milestone]) -> None:
    """Validate that funds may be released to the creator."""
    require_status(product, ProductStatus.FUNDED, "Product is not funded")

    if not all_milestones_completed(milestones):
        pending = [index for index, m in enumerate(milestones) if not m.completed]
        raise reject(BusinessRuleError(
            "Not all milestones are completed",
            rule="milestones_completed",
            product_id=product.id,
            context={"pending_milestones": pending}
        ), rule="milestones_completed")


def check_refund(product: Product, now: int) -> None:
    """Validate that an unfunded product may be refunded."""
    require_status(product, ProductStatus.ACTIVE, "Product is not active")

    if now < product.deadline:
        raise reject(StateError(
            "Funding period has not ended",
            current_state=product.status.value,
            product_id=product.id,
            context={"now": now, "deadline": product.deadline}
        ), rule="after_deadline")


def contributor_total(contributions: Sequence[Contribution], contributor: str) -> int:
    """Sum of every contribution a backer made."""
    return sum(c.amount for c in contributions if c.contributor == contributor)


def select_reward_tier(tiers: Sequence[RewardTier], total: int) -> Optional[RewardTier]:
    """
    Pick the tier with the highest threshold not exceeding the total.

    Ties on threshold resolve to the tier listed first.
    """
    selected = None
    for tier in tiers:
        if tier.min_contribution > total:
            continue
        if selected is None or tier.min_contribution > selected.min_contribution:
            selected = tier
    return selected


def check_reward_claim(
    product: Product,
    contributions: Sequence[Contribution],
    tiers: Sequence[RewardTier],
    claimant: str
) -> RewardTier:
    """Validate a reward claim and return the tier it earns."""
    require_status(product, ProductStatus.COMPLETED, "Product is not completed")

    if not any(c.contributor == claimant for c in contributions):
        raise reject(BusinessRuleError(
            "No contributions found for this contributor",
            rule="has_contributed",
            product_id=product.id,
            context={"claimant": claimant}
        ), rule="has_contributed")

    total = contributor_total(contributions, claimant)
    tier = select_reward_tier(tiers, total)
    if tier is None:
        raise reject(BusinessRuleError(
            "No eligible reward tier found",
            rule="eligible_tier",
            product_id=product.id,
            context={"claimant": claimant, "total_contributed": total}
        ), rule="eligible_tier")

    return tier

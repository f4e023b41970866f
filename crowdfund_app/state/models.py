"""
State machine data models for crowdfunding product lifecycle management.

This module defines immutable data structures for products and the
collections hanging off them: contributions, milestones, reward tiers and
reward claims. Each model converts to and from the plain dictionaries kept
in the key-value store.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class ProductStatus(str, Enum):
    """Product lifecycle states."""
    ACTIVE = "active"
    FUNDED = "funded"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProductStatus.COMPLETED, ProductStatus.FAILED)


@dataclass(frozen=True)
class RewardTier:
    """Contribution threshold mapped to a backer perk."""
    id: int
    min_contribution: int
    description: str
    discount: int                                    # Discount percentage

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "min_contribution": self.min_contribution,
            "description": self.description,
            "discount": self.discount,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RewardTier":
        return cls(
            id=data["id"],
            min_contribution=data["min_contribution"],
            description=data["description"],
            discount=data["discount"],
        )


@dataclass(frozen=True)
class Milestone:
    """Creator-defined deliverable gating fund release."""
    id: int
    description: str
    target_date: int
    completed: bool = False

    def with_completed(self) -> "Milestone":
        """Mark milestone as completed."""
        return replace(self, completed=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "target_date": self.target_date,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Milestone":
        return cls(
            id=data["id"],
            description=data["description"],
            target_date=data["target_date"],
            completed=data.get("completed", False),
        )


@dataclass(frozen=True)
class Contribution:
    """Recorded pledge from one backer to one product."""
    contributor: str
    amount: int

    def to_dict(self) -> dict[str, Any]:
        return {"contributor": self.contributor, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Contribution":
        return cls(contributor=data["contributor"], amount=data["amount"])


@dataclass(frozen=True)
class ClaimRecord:
    """A reward tier claimed by a backer."""
    claimant: str
    tier_id: int
    claimed_at: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "claimant": self.claimant,
            "tier_id": self.tier_id,
            "claimed_at": self.claimed_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClaimRecord":
        return cls(
            claimant=data["claimant"],
            tier_id=data["tier_id"],
            claimed_at=data["claimed_at"],
        )


@dataclass(frozen=True)
class Product:
    """A single crowdfunding campaign."""

    id: int
    creator: str
    name: str
    description: str
    funding_goal: int
    deadline: int

    total_funded: int = 0
    status: ProductStatus = ProductStatus.ACTIVE

    @property
    def remaining(self) -> int:
        """Amount still needed to reach the funding goal."""
        return self.funding_goal - self.total_funded

    def with_status(self, new_status: ProductStatus) -> "Product":
        """Create new product with updated status."""
        return replace(self, status=new_status)

    def with_contribution(self, amount: int) -> "Product":
        """Create new product with the amount added to the funded total."""
        return replace(self, total_funded=self.total_funded + amount)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "creator": self.creator,
            "name": self.name,
            "description": self.description,
            "funding_goal": self.funding_goal,
            "deadline": self.deadline,
            "total_funded": self.total_funded,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        return cls(
            id=data["id"],
            creator=data["creator"],
            name=data["name"],
            description=data["description"],
            funding_goal=data["funding_goal"],
            deadline=data["deadline"],
            total_funded=data.get("total_funded", 0),
            status=ProductStatus(data.get("status", ProductStatus.ACTIVE.value)),
        )

"""Payment gateway collaborator moving funds and issuing reward credentials."""

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from ..state.models import RewardTier


@dataclass(frozen=True)
class TransferRecord:
    """A single recorded fund movement."""
    source: str
    destination: str
    amount: int


@dataclass(frozen=True)
class CredentialRecord:
    """A reward credential issued to a backer."""
    identity: str
    product_id: int
    tier_id: int
    discount: int


class PaymentGateway(ABC):
    """Base class for payment gateways."""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(f"payments.{name}")
        self._transfer_count = 0

    @abstractmethod
    def transfer(self, source: str, destination: str, amount: int) -> None:
        """
        Move funds between two identities.

        Args:
            source: Identity funds are taken from
            destination: Identity funds are credited to
            amount: Amount in the smallest currency unit
        """
        pass

    @abstractmethod
    def issue_credential(self, identity: str, product_id: int, tier: "RewardTier") -> None:
        """
        Issue a reward credential for a tier.

        Args:
            identity: Backer receiving the credential
            product_id: Product the reward belongs to
            tier: Selected reward tier
        """
        pass

    def get_stats(self) -> dict[str, int]:
        return {"transfers": self._transfer_count}


class LedgerPaymentGateway(PaymentGateway):
    """In-process gateway that records every movement in a ledger."""

    def __init__(self, name: str = "ledger"):
        super().__init__(name)
        self.transfers: list[TransferRecord] = []
        self.credentials: list[CredentialRecord] = []
        self.balances: dict[str, int] = defaultdict(int)

    def transfer(self, source: str, destination: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError("Transfer amount must be positive")

        self.transfers.append(TransferRecord(source, destination, amount))
        self.balances[source] -= amount
        self.balances[destination] += amount
        self._transfer_count += 1

        self.logger.info(
            "Funds transferred",
            gateway=self.name,
            source=source,
            destination=destination,
            amount=amount
        )

    def issue_credential(self, identity: str, product_id: int, tier: "RewardTier") -> None:
        self.credentials.append(CredentialRecord(
            identity=identity,
            product_id=product_id,
            tier_id=tier.id,
            discount=tier.discount
        ))

        self.logger.info(
            "Reward credential issued",
            gateway=self.name,
            identity=identity,
            product_id=product_id,
            tier_id=tier.id
        )

    def balance_of(self, identity: str) -> int:
        return self.balances.get(identity, 0)

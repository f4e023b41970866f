"""Pytest configuration and shared fixtures."""

from typing import Optional

import pytest

from crowdfund_app.engine import LifecycleEngine
from crowdfund_app.persistence.store import InMemoryStore
from crowdfund_app.services import LedgerPaymentGateway, ManualClock, SessionAuthProvider
from crowdfund_app.state.models import Milestone, RewardTier

START_TIME = 1_700_000_000


class CrowdfundHarness:
    """Engine plus collaborators, with helpers that sign calls as the right identity."""

    admin = "admin"
    creator = "creator"
    contributor1 = "contributor-1"
    contributor2 = "contributor-2"

    def __init__(self, engine: LifecycleEngine, clock: ManualClock,
                 auth: SessionAuthProvider, payments: LedgerPaymentGateway):
        self.engine = engine
        self.clock = clock
        self.auth = auth
        self.payments = payments

    def create_product(
        self,
        funding_goal: int = 1000,
        deadline_offset: int = 3600,
        reward_tiers: Optional[list] = None,
        milestones: Optional[list] = None,
    ) -> int:
        deadline = self.clock.now() + deadline_offset
        if reward_tiers is None:
            reward_tiers = [
                RewardTier(id=1, min_contribution=50, description="Basic Reward", discount=5),
            ]
        if milestones is None:
            milestones = [
                Milestone(id=0, description="Phase 1", target_date=deadline + 100),
            ]

        with self.auth.as_caller(self.creator):
            return self.engine.create_product(
                self.creator,
                "Test Product",
                "A great product for testing",
                funding_goal,
                deadline,
                reward_tiers,
                milestones,
            )

    def contribute(self, contributor: str, product_id: int, amount: int) -> None:
        with self.auth.as_caller(contributor):
            self.engine.contribute(contributor, product_id, amount)

    def update_milestone(self, product_id: int, milestone_id: int,
                         caller: Optional[str] = None) -> None:
        caller = caller or self.creator
        with self.auth.as_caller(caller):
            self.engine.update_milestone(caller, product_id, milestone_id)

    def claim_reward(self, claimant: str, product_id: int) -> RewardTier:
        with self.auth.as_caller(claimant):
            return self.engine.claim_reward(claimant, product_id)

    def fund_and_complete(self, product_id: int, contributions: list) -> None:
        """Contribute, complete every milestone and distribute funds."""
        for contributor, amount in contributions:
            self.contribute(contributor, product_id, amount)
        for milestone_id in range(len(self.engine.get_milestones(product_id))):
            self.update_milestone(product_id, milestone_id)
        self.engine.distribute_funds(product_id)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=START_TIME)


@pytest.fixture
def auth() -> SessionAuthProvider:
    return SessionAuthProvider()


@pytest.fixture
def payments() -> LedgerPaymentGateway:
    return LedgerPaymentGateway()


@pytest.fixture
def engine(clock, auth, payments) -> LifecycleEngine:
    """Initialized engine backed by an in-memory store."""
    engine = LifecycleEngine(store=InMemoryStore(), auth=auth, clock=clock, payments=payments)
    with auth.as_caller(CrowdfundHarness.admin):
        engine.initialize(CrowdfundHarness.admin)
    return engine


@pytest.fixture
def harness(engine, clock, auth, payments) -> CrowdfundHarness:
    return CrowdfundHarness(engine, clock, auth, payments)

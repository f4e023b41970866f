#!/usr/bin/env python3
"""
Basic Usage Example - Crowdfund Lifecycle Engine

This script walks a single product through its whole successful lifecycle.
It shows how to:
- Initialize the engine with a manual clock and session authentication
- Create a product with reward tiers and milestones
- Fund it from two backers
- Complete milestones and release the funds
- Claim rewards

Run: python examples/basic_usage.py
"""

from datetime import datetime

from crowdfund_app.engine import LifecycleEngine
from crowdfund_app.logging import configure_logging
from crowdfund_app.services import LedgerPaymentGateway, ManualClock, SessionAuthProvider
from crowdfund_app.state.models import Milestone, RewardTier
from crowdfund_app.utils.time import format_timestamp, seconds_until, to_timestamp

ADMIN = "admin"
CREATOR = "creator"
ALICE = "alice"
BOB = "bob"


def print_product(engine: LifecycleEngine, product_id: int) -> None:
    """Print current product state."""
    product = engine.get_product(product_id)
    print(f"📊 Product {product.id} '{product.name}':")
    print(f"  Status: {product.status.value}")
    print(f"  Funded: {product.total_funded}/{product.funding_goal}")
    remaining = seconds_until(product.deadline, engine.clock.now())
    print(f"  Deadline: {format_timestamp(product.deadline)} ({remaining // 3600}h left)")
    for index, milestone in enumerate(engine.get_milestones(product_id)):
        mark = "✅" if milestone.completed else "⏳"
        print(f"  Milestone {index}: {mark} {milestone.description}")
    print()


def main():
    """Main demonstration function."""
    print("🚀 Crowdfund Lifecycle Engine - Basic Usage Demo")
    print("=" * 60)

    configure_logging(level="WARNING")

    clock = ManualClock(start=to_timestamp(datetime(2024, 1, 1)))
    auth = SessionAuthProvider()
    payments = LedgerPaymentGateway()
    engine = LifecycleEngine(auth=auth, clock=clock, payments=payments)

    print("1. Initializing the engine...")
    with auth.as_caller(ADMIN):
        engine.initialize(ADMIN)
    print(f"   Admin: {engine.get_admin()}")
    print()

    print("2. Creating a product...")
    with auth.as_caller(CREATOR):
        product_id = engine.create_product(
            CREATOR,
            "Solar Backpack",
            "A backpack that charges your phone",
            1000,
            clock.now() + 7 * 24 * 3600,
            [
                RewardTier(id=1, min_contribution=100, description="Early bird", discount=10),
                RewardTier(id=2, min_contribution=500, description="Founder", discount=25),
            ],
            [
                Milestone(id=0, description="Prototype", target_date=clock.now() + 30 * 24 * 3600),
                Milestone(id=1, description="First shipment", target_date=clock.now() + 90 * 24 * 3600),
            ],
        )
    print_product(engine, product_id)

    print("3. Backers contribute...")
    with auth.as_caller(ALICE):
        engine.contribute(ALICE, product_id, 600)
    with auth.as_caller(BOB):
        engine.contribute(BOB, product_id, 400)
    print_product(engine, product_id)

    print("4. Creator completes milestones...")
    with auth.as_caller(CREATOR):
        for milestone_id in range(len(engine.get_milestones(product_id))):
            clock.advance(3600)
            engine.update_milestone(CREATOR, product_id, milestone_id)
    print_product(engine, product_id)

    print("5. Releasing funds...")
    engine.distribute_funds(product_id)
    print(f"   Creator balance: {payments.balance_of(CREATOR)}")
    print_product(engine, product_id)

    print("6. Backers claim rewards...")
    for backer in (ALICE, BOB):
        with auth.as_caller(backer):
            tier = engine.claim_reward(backer, product_id)
        print(f"   {backer}: {tier.description} ({tier.discount}% off)")

    print()
    print("🎉 Demo completed")


if __name__ == "__main__":
    main()

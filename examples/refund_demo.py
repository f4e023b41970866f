#!/usr/bin/env python3
"""
Refund Demo - Crowdfund Lifecycle Engine

Shows the failed-campaign path: a product misses its goal, the deadline
passes, and contributions are returned to the backers.

Run: python examples/refund_demo.py
"""

from crowdfund_app.engine import LifecycleEngine
from crowdfund_app.errors import CrowdfundError
from crowdfund_app.logging import configure_logging
from crowdfund_app.services import LedgerPaymentGateway, ManualClock
from crowdfund_app.utils.time import format_timestamp

CREATOR = "creator"
BACKER = "backer"


def main():
    """Main demonstration function."""
    print("💸 Crowdfund Lifecycle Engine - Refund Demo")
    print("=" * 60)

    configure_logging(level="WARNING")

    clock = ManualClock(start=1_700_000_000)
    payments = LedgerPaymentGateway()
    engine = LifecycleEngine(clock=clock, payments=payments)
    engine.initialize("admin")

    product_id = engine.create_product(
        CREATOR, "Smart Mug", "Keeps coffee warm", 5000, clock.now() + 3600, [], []
    )
    engine.contribute(BACKER, product_id, 1200)
    print(f"1. Raised {engine.get_product(product_id).total_funded} of 5000")

    print("2. Trying to refund before the deadline...")
    try:
        engine.refund_contributors(product_id)
    except CrowdfundError as e:
        print(f"   Rejected: {e}")

    clock.advance(3600)
    print(f"3. Deadline {format_timestamp(engine.get_product(product_id).deadline)} passed, refunding...")
    engine.refund_contributors(product_id)

    product = engine.get_product(product_id)
    print(f"   Status: {product.status.value}")
    print(f"   Recorded contributions: {len(engine.get_contributions(product_id))}")
    print(f"   Backer balance: {payments.balance_of(BACKER)}")
    print()
    print("🎉 Demo completed")


if __name__ == "__main__":
    main()

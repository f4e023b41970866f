"""
Main lifecycle engine coordinator.

Exposes the crowdfunding entry points and coordinates the collaborators
around them: caller authentication, the clock, the key-value store and the
payment gateway. Each entry point reads the clock once, runs every rule
check, then commits its writes to the store as a single batch.
"""

from pathlib import Path
from typing import Any, Callable, Optional, Sequence, Union

import structlog

from .config.defaults import DefaultConfig, config_from_dict, get_default_config
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .errors import (
    AuthorizationError,
    BusinessRuleError,
    ConfigurationError,
    NotFoundError,
    PaymentError,
    PersistenceError,
    ProductNotFoundError,
    StateError,
)
from .logging import configure_logging
from .persistence.store import InMemoryStore, KeyValueStore, WriteOp, create_store
from .services.clock import Clock, SystemClock
from .services.identity import AllowAllAuthProvider, AuthProvider
from .services.payments import LedgerPaymentGateway, PaymentGateway
from .state import rules
from .state.models import (
    ClaimRecord,
    Contribution,
    Milestone,
    Product,
    ProductStatus,
    RewardTier,
)
from .state.transitions import transition_handler

logger = structlog.get_logger(__name__)

# Store entity names
ENGINE = "engine"
PRODUCT = "product"
CONTRIBUTION = "contribution"
MILESTONE = "milestone"
REWARD_TIER = "reward_tier"
CLAIM = "claim"

# Engine-wide record lives under product id 0; product ids start at 1
ENGINE_RECORD_ID = 0
FIRST_PRODUCT_ID = 1


def _coerce(items: Sequence[Union[dict, Any]], model: type) -> list:
    return [model.from_dict(item) if isinstance(item, dict) else item for item in items]


class LifecycleEngine:
    """
    Coordinator for the crowdfunding product lifecycle.

    Product flow:
    ACTIVE → FUNDED (goal reached) → COMPLETED (milestones done, funds released)
    ACTIVE → FAILED (deadline passed, contributions refunded)
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        auth: Optional[AuthProvider] = None,
        clock: Optional[Clock] = None,
        payments: Optional[PaymentGateway] = None,
        config: Optional[DefaultConfig] = None
    ) -> None:
        """Initialize the lifecycle engine with its collaborators."""
        self.logger = logger
        self.config = config or get_default_config()

        self.store = store if store is not None else InMemoryStore()
        self.auth = auth or AllowAllAuthProvider()
        self.clock = clock or SystemClock()
        self.payments = payments or LedgerPaymentGateway()

        self.escrow_account = self.config.payments.escrow_account

        self.logger.info(
            "Lifecycle engine initialized",
            store=type(self.store).__name__,
            escrow_account=self.escrow_account
        )

    @classmethod
    def from_config(
        cls,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[dict[str, Any]] = None,
        auth: Optional[AuthProvider] = None,
        clock: Optional[Clock] = None,
        payments: Optional[PaymentGateway] = None
    ) -> "LifecycleEngine":
        """Build an engine from the merged YAML and override configuration."""
        loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
        merged = loader.merge_config(overrides)

        issues = ConfigValidator.validate_config(merged)
        if issues:
            messages = [f"{issue.field}: {issue.message} (got: {issue.value})" for issue in issues]
            logger.error("Configuration validation failed", errors=messages)
            raise ConfigurationError("Invalid engine configuration", issues=issues)

        config = config_from_dict(merged)
        configure_logging(
            level=config.logging.level,
            format_json=config.logging.format_json,
            include_timestamp=config.logging.include_timestamp
        )
        store = create_store(config.storage.backend, config.storage.db_path)

        return cls(store=store, auth=auth, clock=clock, payments=payments, config=config)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def initialize(self, admin: str) -> None:
        """Record the admin identity and start the product id counter."""
        self.auth.require_auth(admin)

        if self.store.get(ENGINE, ENGINE_RECORD_ID) is not None:
            raise rules.reject(StateError("Engine already initialized"), rule="initialize_once")

        self.store.put(ENGINE, ENGINE_RECORD_ID, {
            "admin": admin,
            "next_product_id": FIRST_PRODUCT_ID,
        })

        self.logger.info("Engine initialized", admin=admin)

    def create_product(
        self,
        creator: str,
        name: str,
        description: str,
        funding_goal: int,
        deadline: int,
        reward_tiers: Sequence[Union[RewardTier, dict]],
        milestones: Sequence[Union[Milestone, dict]]
    ) -> int:
        """
        Register a new product in the ACTIVE state.

        Reward tiers and milestones are stored as given, in order; a
        milestone is later addressed by its position in this list.

        Returns:
            The new product id
        """
        self.auth.require_auth(creator)
        now = self.clock.now()

        meta = self._require_initialized()
        rules.check_creation(funding_goal, deadline, now)

        tiers = _coerce(reward_tiers, RewardTier)
        stages = _coerce(milestones, Milestone)

        product_id = meta["next_product_id"]
        product = Product(
            id=product_id,
            creator=creator,
            name=name,
            description=description,
            funding_goal=funding_goal,
            deadline=deadline,
        )

        ops = [WriteOp.put(PRODUCT, product_id, product.to_dict())]
        ops.extend(WriteOp.put(REWARD_TIER, product_id, tier.to_dict(), sub_id=index)
                   for index, tier in enumerate(tiers))
        ops.extend(WriteOp.put(MILESTONE, product_id, stage.to_dict(), sub_id=index)
                   for index, stage in enumerate(stages))
        ops.append(WriteOp.put(ENGINE, ENGINE_RECORD_ID, {
            **meta,
            "next_product_id": product_id + 1,
        }))
        self.store.apply(ops)

        self.logger.info(
            "Product created",
            product_id=product_id,
            creator=creator,
            funding_goal=funding_goal,
            deadline=deadline,
            reward_tiers=len(tiers),
            milestones=len(stages)
        )
        return product_id

    def contribute(self, contributor: str, product_id: int, amount: int) -> None:
        """Record a contribution, moving the product to FUNDED on reaching its goal."""
        self.auth.require_auth(contributor)
        now = self.clock.now()

        product = self._load_product(product_id)
        rules.check_contribution(product, amount, now)

        self._pay("transfer", self.payments.transfer, contributor, self.escrow_account, amount)

        updated = product.with_contribution(amount)
        if rules.reaches_goal(updated):
            updated = transition_handler.apply_transition(
                updated, ProductStatus.FUNDED, "contribute", now,
                context={"contributor": contributor, "amount": amount}
            )

        try:
            sequence = self.store.count_prefix(CONTRIBUTION, product_id)
            self.store.apply([
                WriteOp.put(CONTRIBUTION, product_id,
                            Contribution(contributor, amount).to_dict(), sub_id=sequence),
                WriteOp.put(PRODUCT, product_id, updated.to_dict()),
            ])
        except PersistenceError as e:
            # Funds already sit in escrow; send them back before surfacing the failure
            self.logger.error(
                "Contribution not recorded, reversing transfer",
                product_id=product_id,
                contributor=contributor,
                amount=amount,
                error=str(e)
            )
            self._pay("transfer", self.payments.transfer, self.escrow_account, contributor, amount)
            raise

        self.logger.info(
            "Contribution recorded",
            product_id=product_id,
            contributor=contributor,
            amount=amount,
            total_funded=updated.total_funded,
            funding_goal=updated.funding_goal,
            status=updated.status.value
        )

    def update_milestone(self, caller: str, product_id: int, milestone_id: int) -> None:
        """Mark a milestone of a funded product as completed."""
        self.auth.require_auth(caller)

        product = self._load_product(product_id)
        if caller != product.creator:
            raise rules.reject(AuthorizationError(
                "Only the creator can update milestones",
                identity=caller,
                product_id=product_id
            ), rule="creator_only")

        rules.require_status(product, ProductStatus.FUNDED, "Product is not funded")

        record = None
        if milestone_id >= 0:
            record = self.store.get(MILESTONE, product_id, milestone_id)
        if record is None:
            raise rules.reject(NotFoundError(
                "Milestone not found",
                entity=MILESTONE,
                key=milestone_id,
                product_id=product_id
            ), rule="milestone_exists")

        milestone = Milestone.from_dict(record)
        if milestone.completed:
            raise rules.reject(BusinessRuleError(
                "Milestone already completed",
                rule="milestone_incomplete",
                product_id=product_id,
                context={"milestone_id": milestone_id}
            ), rule="milestone_incomplete")

        self.store.put(MILESTONE, product_id, milestone.with_completed().to_dict(), sub_id=milestone_id)

        self.logger.info(
            "Milestone completed",
            product_id=product_id,
            milestone_id=milestone_id,
            description=milestone.description
        )

    def distribute_funds(self, product_id: int) -> None:
        """Release escrowed funds to the creator once every milestone is done."""
        now = self.clock.now()

        product = self._load_product(product_id)
        rules.check_distribution(product, self.get_milestones(product_id))

        self._pay("transfer", self.payments.transfer,
                  self.escrow_account, product.creator, product.total_funded)

        updated = transition_handler.apply_transition(
            product, ProductStatus.COMPLETED, "distribute_funds", now
        )
        self.store.put(PRODUCT, product_id, updated.to_dict())

        self.logger.info(
            "Funds distributed",
            product_id=product_id,
            creator=product.creator,
            amount=product.total_funded
        )

    def refund_contributors(self, product_id: int) -> None:
        """Return every contribution of an expired, unfunded product."""
        now = self.clock.now()

        product = self._load_product(product_id)
        rules.check_refund(product, now)

        contributions = self.get_contributions(product_id)
        for contribution in contributions:
            self._pay("transfer", self.payments.transfer,
                      self.escrow_account, contribution.contributor, contribution.amount)

        updated = transition_handler.apply_transition(
            product, ProductStatus.FAILED, "refund_contributors", now,
            context={"refunded_contributions": len(contributions)}
        )
        self.store.apply([
            WriteOp.put(PRODUCT, product_id, updated.to_dict()),
            WriteOp.delete_prefix(CONTRIBUTION, product_id),
        ])

        self.logger.info(
            "Contributors refunded",
            product_id=product_id,
            refunded_contributions=len(contributions),
            refunded_amount=sum(c.amount for c in contributions)
        )

    def claim_reward(self, claimant: str, product_id: int) -> RewardTier:
        """
        Claim the reward tier earned by a backer of a completed product.

        Returns:
            The tier with the highest threshold the backer's total reaches
        """
        self.auth.require_auth(claimant)
        now = self.clock.now()

        product = self._load_product(product_id)
        tier = rules.check_reward_claim(
            product,
            self.get_contributions(product_id),
            self.get_reward_tiers(product_id),
            claimant
        )

        claims = self.get_claims(product_id)
        slot = next((index for index, claim in enumerate(claims)
                     if claim.claimant == claimant), None)
        if slot is not None and not self.config.rewards.allow_repeat_claims:
            raise rules.reject(BusinessRuleError(
                "Reward already claimed",
                rule="single_claim",
                product_id=product_id,
                context={"claimant": claimant, "tier_id": claims[slot].tier_id}
            ), rule="single_claim")

        self._pay("issue_credential", self.payments.issue_credential, claimant, product_id, tier)

        record = ClaimRecord(claimant=claimant, tier_id=tier.id, claimed_at=now)
        self.store.put(CLAIM, product_id, record.to_dict(),
                       sub_id=len(claims) if slot is None else slot)

        self.logger.info(
            "Reward claimed",
            product_id=product_id,
            claimant=claimant,
            tier_id=tier.id,
            discount=tier.discount,
            repeat=slot is not None
        )
        return tier

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_product(self, product_id: int) -> Product:
        """Get a product by id, raising ProductNotFoundError if absent."""
        return self._load_product(product_id)

    def get_contributions(self, product_id: int) -> list[Contribution]:
        """Contributions in call order; empty for an unknown product."""
        return [Contribution.from_dict(r) for r in self.store.list_prefix(CONTRIBUTION, product_id)]

    def get_milestones(self, product_id: int) -> list[Milestone]:
        """Milestones in creation order; empty for an unknown product."""
        return [Milestone.from_dict(r) for r in self.store.list_prefix(MILESTONE, product_id)]

    def get_reward_tiers(self, product_id: int) -> list[RewardTier]:
        """Reward tiers in creation order; empty for an unknown product."""
        return [RewardTier.from_dict(r) for r in self.store.list_prefix(REWARD_TIER, product_id)]

    def get_claims(self, product_id: int) -> list[ClaimRecord]:
        """Reward claims in claim order; empty for an unknown product."""
        return [ClaimRecord.from_dict(r) for r in self.store.list_prefix(CLAIM, product_id)]

    def get_contributor_total(self, product_id: int, contributor: str) -> int:
        return rules.contributor_total(self.get_contributions(product_id), contributor)

    def get_admin(self) -> Optional[str]:
        meta = self.store.get(ENGINE, ENGINE_RECORD_ID)
        return meta["admin"] if meta else None

    def get_next_product_id(self) -> int:
        meta = self.store.get(ENGINE, ENGINE_RECORD_ID)
        return meta["next_product_id"] if meta else FIRST_PRODUCT_ID

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_initialized(self) -> dict[str, Any]:
        meta = self.store.get(ENGINE, ENGINE_RECORD_ID)
        if meta is None:
            raise rules.reject(StateError("Engine is not initialized"), rule="initialized")
        return meta

    def _load_product(self, product_id: int) -> Product:
        record = self.store.get(PRODUCT, product_id)
        if record is None:
            raise rules.reject(ProductNotFoundError(product_id=product_id), rule="product_exists")
        return Product.from_dict(record)

    def _pay(self, operation: str, call: Callable[..., None], *args: Any) -> None:
        """Invoke the payment gateway, surfacing failures as PaymentError."""
        try:
            call(*args)
        except PaymentError:
            raise
        except Exception as e:
            self.logger.error(
                "Payment gateway failure",
                operation=operation,
                gateway=getattr(self.payments, "name", type(self.payments).__name__),
                error=str(e)
            )
            raise PaymentError(f"Payment {operation} failed: {e}", operation=operation) from e

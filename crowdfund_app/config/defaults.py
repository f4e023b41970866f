"""Default configuration parameters for the crowdfunding lifecycle engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StorageParams:
    """Key-value store backend parameters."""
    backend: str = "memory"                  # memory, sqlite
    db_path: str = "crowdfund.db"            # Used by the sqlite backend


@dataclass(frozen=True)
class LoggingParams:
    """Structured logging parameters."""
    level: str = "INFO"
    format_json: bool = False
    include_timestamp: bool = True


@dataclass(frozen=True)
class PaymentParams:
    """Payment gateway parameters."""
    escrow_account: str = "crowdfund-escrow"  # Holds pledged funds until release


@dataclass(frozen=True)
class RewardParams:
    """Reward claim parameters."""
    allow_repeat_claims: bool = False        # Re-issue credential on a second claim


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    storage: StorageParams
    logging: LoggingParams
    payments: PaymentParams
    rewards: RewardParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        storage=StorageParams(),
        logging=LoggingParams(),
        payments=PaymentParams(),
        rewards=RewardParams(),
    )


def config_from_dict(config: dict) -> DefaultConfig:
    """Build a DefaultConfig from a merged configuration dictionary."""
    return DefaultConfig(
        storage=StorageParams(**config.get("storage", {})),
        logging=LoggingParams(**config.get("logging", {})),
        payments=PaymentParams(**config.get("payments", {})),
        rewards=RewardParams(**config.get("rewards", {})),
    )

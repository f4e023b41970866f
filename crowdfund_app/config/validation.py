"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

from .defaults import DefaultConfig

STORAGE_BACKENDS = ("memory", "sqlite")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ConfigIssue:
    """Represents a configuration validation problem."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_unknown_keys(section: str, params: dict[str, Any]) -> list[ConfigIssue]:
        """Flag keys that the section's dataclass does not define."""
        known = DefaultConfig.__dataclass_fields__[section].type.__dataclass_fields__
        return [
            ConfigIssue(field=f"{section}.{key}", message="Unknown parameter", value=value)
            for key, value in params.items()
            if key not in known
        ]

    @staticmethod
    def validate_storage_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate storage parameters."""
        errors = []

        if "backend" in params:
            value = params["backend"]
            if value not in STORAGE_BACKENDS:
                errors.append(ConfigIssue(
                    field="storage.backend",
                    message=f"Must be one of {', '.join(STORAGE_BACKENDS)}",
                    value=value
                ))

        if "db_path" in params:
            value = params["db_path"]
            if not isinstance(value, str) or not value:
                errors.append(ConfigIssue(
                    field="storage.db_path",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
                errors.append(ConfigIssue(
                    field="logging.level",
                    message=f"Must be one of {', '.join(LOG_LEVELS)}",
                    value=value
                ))

        for flag in ("format_json", "include_timestamp"):
            if flag in params and not isinstance(params[flag], bool):
                errors.append(ConfigIssue(
                    field=f"logging.{flag}",
                    message="Must be a boolean",
                    value=params[flag]
                ))

        return errors

    @staticmethod
    def validate_payment_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate payment gateway parameters."""
        errors = []

        if "escrow_account" in params:
            value = params["escrow_account"]
            if not isinstance(value, str) or not value.strip():
                errors.append(ConfigIssue(
                    field="payments.escrow_account",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_reward_params(params: dict[str, Any]) -> list[ConfigIssue]:
        """Validate reward claim parameters."""
        errors = []

        if "allow_repeat_claims" in params:
            value = params["allow_repeat_claims"]
            if not isinstance(value, bool):
                errors.append(ConfigIssue(
                    field="rewards.allow_repeat_claims",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ConfigIssue]:
        """Validate complete configuration."""
        errors = []

        section_validators = {
            "storage": ConfigValidator.validate_storage_params,
            "logging": ConfigValidator.validate_logging_params,
            "payments": ConfigValidator.validate_payment_params,
            "rewards": ConfigValidator.validate_reward_params,
        }

        for section, params in config.items():
            validator = section_validators.get(section)
            if validator is None:
                errors.append(ConfigIssue(field=section, message="Unknown section", value=params))
                continue
            if not isinstance(params, dict):
                errors.append(ConfigIssue(field=section, message="Must be a mapping", value=params))
                continue
            errors.extend(ConfigValidator.validate_unknown_keys(section, params))
            errors.extend(validator(params))

        return errors

"""
Configuration validation for Spatium.

Provides cross-field checks beyond Pydantic schema validation.
"""

from spatium.config.schema import SpatiumConfig


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


def validate_config(config: SpatiumConfig) -> None:
    """
    Perform cross-field validation on configuration.

    Every failing check is collected before raising.

    Args:
        config: SpatiumConfig instance to validate.

    Raises:
        ConfigurationError: If validation fails.
    """
    errors: list[str] = []

    errors.extend(_validate_tolerances(config))
    errors.extend(_validate_selfcheck(config))

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(
            f"  - {e}" for e in errors
        )
        raise ConfigurationError(error_msg)


def _validate_tolerances(config: SpatiumConfig) -> list[str]:
    """Validate tolerance ordering."""
    errors: list[str] = []
    tol = config.tolerances

    if tol.normalization > tol.round_trip:
        errors.append("tolerances.normalization must not exceed tolerances.round_trip")

    if tol.round_trip > tol.associativity:
        errors.append("tolerances.round_trip must not exceed tolerances.associativity")

    return errors


def _validate_selfcheck(config: SpatiumConfig) -> list[str]:
    """Validate self-check configuration."""
    errors: list[str] = []
    check = config.selfcheck

    if len(set(check.checks)) != len(check.checks):
        errors.append("selfcheck.checks must not list a check twice")

    if check.checks and check.samples < len(check.checks):
        errors.append("selfcheck.samples must be at least the number of enabled checks")

    if check.min_scale <= 0:
        errors.append("selfcheck.min_scale must be positive")

    if check.max_scale < check.min_scale:
        errors.append("selfcheck.max_scale must not be less than selfcheck.min_scale")

    return errors

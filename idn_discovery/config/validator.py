"""Configuration validator.

Checks a parsed DiscoveryConfig against value ranges before a round starts.
"""

import math

from ..models import CLIENT_GROUP_MAX, CLIENT_GROUP_MIN
from .schema import DiscoveryConfig, ValidationError, ValidationResult


# Smallest buffer that holds a scan response (header + body)
MIN_RECEIVE_BUFFER = 44


def validate_config(config: DiscoveryConfig) -> ValidationResult:
    """Validate a DiscoveryConfig.

    Args:
        config: Parsed configuration.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    if not _is_int(config.client_group) or not (
        CLIENT_GROUP_MIN <= config.client_group <= CLIENT_GROUP_MAX
    ):
        errors.append(ValidationError(
            path="client_group",
            message=f"Client group must be an integer {CLIENT_GROUP_MIN}-{CLIENT_GROUP_MAX}, "
                    f"got {config.client_group!r}.",
        ))

    if not _is_number(config.timeout) or not math.isfinite(config.timeout) or config.timeout <= 0:
        errors.append(ValidationError(
            path="timeout",
            message=f"Timeout must be a positive finite number of seconds, got {config.timeout!r}.",
        ))
    elif config.timeout > 10:
        warnings.append(ValidationError(
            path="timeout",
            message=f"Timeout of {config.timeout}s is unusually long for a LAN scan.",
            severity="warning",
        ))

    if not _is_int(config.port) or not 1 <= config.port <= 65535:
        errors.append(ValidationError(
            path="port",
            message=f"Port must be an integer 1-65535, got {config.port!r}.",
        ))

    if not _is_int(config.receive_buffer) or config.receive_buffer < MIN_RECEIVE_BUFFER:
        errors.append(ValidationError(
            path="receive_buffer",
            message=f"Receive buffer must be at least {MIN_RECEIVE_BUFFER} bytes, "
                    f"got {config.receive_buffer!r}.",
        ))

    for name in ("query_services", "skip_loopback"):
        if not isinstance(getattr(config, name), bool):
            errors.append(ValidationError(
                path=name,
                message=f"'{name}' must be true or false.",
            ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

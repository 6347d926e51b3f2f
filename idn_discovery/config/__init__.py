"""Config module - discovery settings, YAML parsing and validation."""

from .schema import DEFAULT_TIMEOUT, DiscoveryConfig, ValidationError, ValidationResult
from .parser import parse_config, parse_config_data
from .validator import validate_config

__all__ = [
    "DEFAULT_TIMEOUT",
    "DiscoveryConfig",
    "ValidationError",
    "ValidationResult",
    "parse_config",
    "parse_config_data",
    "validate_config",
]

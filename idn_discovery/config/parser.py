"""YAML configuration parser.

Example file:

    discovery:
      client_group: 0
      timeout: 0.5
      port: 7255
      query_services: true
      skip_loopback: true
"""

from pathlib import Path
from typing import Union

import yaml

from .schema import DiscoveryConfig


def parse_config(file_path: Union[str, Path]) -> DiscoveryConfig:
    """Parse a YAML configuration file into a DiscoveryConfig.

    Args:
        file_path: Path to the YAML file.

    Returns:
        Parsed DiscoveryConfig (defaults for missing keys).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the YAML is malformed or has the wrong structure.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ValueError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML in {file_path}: {e}") from e

    if data is None:
        return DiscoveryConfig()

    return parse_config_data(data, source=str(file_path))


def parse_config_data(data: dict, source: str = "<inline>") -> DiscoveryConfig:
    """Parse a configuration from an already loaded mapping.

    Accepts either the settings at top level or nested under 'discovery'.
    Unknown keys are ignored.

    Raises:
        ValueError: If the data is not a mapping.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}")

    if "discovery" in data:
        data = data["discovery"]
        if data is None:
            return DiscoveryConfig()
        if not isinstance(data, dict):
            raise ValueError(f"'discovery' must be a mapping in {source}")

    return DiscoveryConfig(**{
        k: v for k, v in data.items()
        if k in DiscoveryConfig.__dataclass_fields__
    })

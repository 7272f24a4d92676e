"""
Configuration module for client settings.

This module provides configuration loading and validation for the API origin,
response decoding policy, request timeout and telemetry options. Configuration
is always passed explicitly; nothing here is held globally.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

DEFAULT_ORIGIN = "https://api.twitch.tv"


class ConfigValidationError(ValueError):
    """Raised when a configuration value is out of range or malformed."""


class DecodePolicy(Enum):
    """How unknown fields in a response record are treated."""

    STRICT = "strict"  # unknown fields fail the decode
    LENIENT = "lenient"  # unknown fields are dropped


@dataclass
class TelemetryConfig:
    """Configuration for request telemetry."""

    level: str = "info"
    format_json: bool = True
    collect_stats: bool = False


@dataclass
class ClientConfig:
    """Configuration for a Helix client."""

    origin: str = DEFAULT_ORIGIN
    decode_policy: DecodePolicy = DecodePolicy.STRICT
    timeout_s: float = 30.0
    enforce_scopes: bool = False
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientConfig":
        """Create ClientConfig from dictionary."""
        telemetry_data = data.get("telemetry") or {}
        telemetry = TelemetryConfig(**telemetry_data)

        policy = data.get("decode_policy", DecodePolicy.STRICT.value)
        try:
            decode_policy = DecodePolicy(policy)
        except ValueError:
            raise ConfigValidationError(
                f"decode_policy must be 'strict' or 'lenient', got {policy!r}"
            )

        return cls(
            origin=data.get("origin", DEFAULT_ORIGIN),
            decode_policy=decode_policy,
            timeout_s=data.get("timeout_s", 30.0),
            enforce_scopes=data.get("enforce_scopes", False),
            telemetry=telemetry,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a YAML-friendly dictionary."""
        return {
            "origin": self.origin,
            "decode_policy": self.decode_policy.value,
            "timeout_s": self.timeout_s,
            "enforce_scopes": self.enforce_scopes,
            "telemetry": {
                "level": self.telemetry.level,
                "format_json": self.telemetry.format_json,
                "collect_stats": self.telemetry.collect_stats,
            },
        }


def load_config(config_path: str | Path | None = None) -> ClientConfig:
    """
    Load client configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        ClientConfig with the file's settings applied over the defaults

    Raises:
        yaml.YAMLError: If config file is invalid YAML
        ConfigValidationError: If config validation fails
    """
    if config_path is None:
        config_path = Path(__file__).parents[3] / "config" / "helix.yml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        # Return default config if file doesn't exist
        return ClientConfig()

    with open(config_path, "r") as f:
        data = yaml.safe_load(f)

    if not data:
        return ClientConfig()

    if not isinstance(data, dict):
        raise ConfigValidationError(f"{config_path} must contain a mapping")

    try:
        config = ClientConfig.from_dict(data)
    except TypeError as e:
        # Unknown keys under "telemetry"
        raise ConfigValidationError(f"Invalid telemetry section: {e}")
    validate_config(config)
    return config


def validate_config(config: ClientConfig) -> None:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    parts = urlsplit(config.origin)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigValidationError(f"origin must be an http(s) URL, got {config.origin!r}")

    if parts.path not in ("", "/") or parts.query or parts.fragment:
        raise ConfigValidationError(f"origin must not carry a path or query: {config.origin!r}")

    if not isinstance(config.decode_policy, DecodePolicy):
        raise ConfigValidationError("decode_policy must be a DecodePolicy")

    if not isinstance(config.timeout_s, (int, float)) or config.timeout_s <= 0:
        raise ConfigValidationError("timeout_s must be positive")

    if config.telemetry.level not in ("info", "debug"):
        raise ConfigValidationError(
            f"telemetry.level must be 'info' or 'debug', got {config.telemetry.level!r}"
        )

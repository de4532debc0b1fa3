"""Runtime configuration for Sift.

Settings are layered, later layers winning:
1. Defaults on :class:`SiftConfig`
2. A YAML file (``path`` argument or ``$SIFT_CONFIG``)
3. ``SIFT_*`` environment variables
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

import yaml

from sift.audit.audit_log import DEFAULT_TABLE
from sift.moderation.policy import DecisionPolicy, FailureMode, load_policy


class ConfigError(ValueError):
    """Raised for invalid configuration."""


_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_STR_FIELDS = ("audit_dir", "audit_url", "audit_api_key", "audit_table", "policy_path", "log_level")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}

# env var -> field name
_ENV_OVERRIDES = {
    "SIFT_AUDIT_ENABLED": "audit_enabled",
    "SIFT_AUDIT_DIR": "audit_dir",
    "SIFT_AUDIT_URL": "audit_url",
    "SIFT_AUDIT_API_KEY": "audit_api_key",
    "SIFT_AUDIT_TABLE": "audit_table",
    "SIFT_AUDIT_QUEUE_SIZE": "audit_queue_size",
    "SIFT_POLICY": "policy_path",
    "SIFT_FAILURE_MODE": "failure_mode",
    "SIFT_BATCH_WORKERS": "batch_workers",
    "SIFT_LOG_LEVEL": "log_level",
}


@dataclass
class SiftConfig:
    """Engine, audit and logging settings."""

    audit_enabled: bool = True
    audit_dir: str = ""  # empty -> ~/.sift/audit_logs
    audit_url: str = ""  # when set, records go to the REST sink instead of files
    audit_api_key: str = ""
    audit_table: str = DEFAULT_TABLE
    audit_queue_size: int = 1000
    policy_path: str = ""
    failure_mode: Optional[str] = None  # overrides the policy file when set
    batch_workers: int = 0  # 0 -> analyze batches sequentially
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        for name in _STR_FIELDS:
            if not isinstance(getattr(self, name), str):
                raise ConfigError(f"{name} must be a string, got {getattr(self, name)!r}")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {self.log_level!r}")
        if self.failure_mode is not None:
            self.failure_mode = self.failure_mode.lower()
            if self.failure_mode not in {m.value for m in FailureMode}:
                raise ConfigError(f"failure_mode must be 'open' or 'closed', got {self.failure_mode!r}")
        if self.audit_queue_size < 1:
            raise ConfigError("audit_queue_size must be at least 1")
        if self.batch_workers < 0:
            raise ConfigError("batch_workers must not be negative")

    def load_decision_policy(self) -> DecisionPolicy:
        """The policy file (or defaults) with the configured failure mode applied."""
        policy = load_policy(self.policy_path) if self.policy_path else DecisionPolicy()
        if self.failure_mode:
            policy = dataclasses.replace(policy, failure_mode=FailureMode(self.failure_mode))
        return policy

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


def _coerce(name: str, raw: object, target: type) -> object:
    if target is bool:
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ConfigError(f"{name} must be a boolean, got {raw!r}")
    if target is int:
        try:
            return int(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    return None if raw is None else str(raw)


def _field_types() -> dict[str, type]:
    types = {}
    for f in fields(SiftConfig):
        annotation = str(f.type)
        if annotation == "bool":
            types[f.name] = bool
        elif annotation == "int":
            types[f.name] = int
        else:
            types[f.name] = str
    return types


def load_config(
    path: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> SiftConfig:
    """Build a :class:`SiftConfig` from defaults, a YAML file and the environment."""
    env = os.environ if env is None else env
    types = _field_types()
    values: dict[str, object] = {}

    path = path or env.get("SIFT_CONFIG")
    if path:
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        unknown = set(data) - set(types)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        for key, raw in data.items():
            values[key] = _coerce(key, raw, types[key])

    for var, key in _ENV_OVERRIDES.items():
        if var in env:
            values[key] = _coerce(var, env[var], types[key])

    return SiftConfig(**values)  # type: ignore[arg-type]

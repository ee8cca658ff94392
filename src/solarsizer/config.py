"""Sizing policy configuration.

Policy is read from config/sizing.yaml and can be overridden with
environment variables (a .env file is honoured):

    SOLARSIZER_STRICT_CEILING      true/false
    SOLARSIZER_CATALOG_FALLBACK    fail | closest-match
    SOLARSIZER_BATTERY_EFFICIENCY  true/false
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "sizing.yaml"

FALLBACK_POLICIES = ("fail", "closest-match")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class SizingPolicy:
    """Behaviour switches for the sizing engine."""

    strict_ceiling: bool = False  # raise instead of flagging oversized systems
    catalog_fallback: str = "fail"  # 'fail' or 'closest-match'
    apply_battery_efficiency_factor: bool = True

    def __post_init__(self):
        if self.catalog_fallback not in FALLBACK_POLICIES:
            raise ValueError(
                f"catalog_fallback must be one of {', '.join(FALLBACK_POLICIES)}, "
                f"got {self.catalog_fallback!r}"
            )


def parse_bool(value: str | bool, name: str) -> bool:
    """Parse a boolean config value."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{name} must be true or false, got {value!r}")


def policy_from_dict(data: dict | None) -> SizingPolicy:
    """Build a policy from the `policy:` mapping of the config file."""
    data = data or {}
    policy = SizingPolicy()
    if "strict_ceiling" in data:
        policy = replace(policy, strict_ceiling=parse_bool(data["strict_ceiling"], "strict_ceiling"))
    if "catalog_fallback" in data:
        policy = replace(policy, catalog_fallback=str(data["catalog_fallback"]))
    if "apply_battery_efficiency_factor" in data:
        policy = replace(
            policy,
            apply_battery_efficiency_factor=parse_bool(
                data["apply_battery_efficiency_factor"], "apply_battery_efficiency_factor"
            ),
        )
    return policy


def apply_env_overrides(policy: SizingPolicy) -> SizingPolicy:
    """Apply SOLARSIZER_* environment variables on top of a policy."""
    env = os.environ
    if "SOLARSIZER_STRICT_CEILING" in env:
        policy = replace(
            policy, strict_ceiling=parse_bool(env["SOLARSIZER_STRICT_CEILING"], "SOLARSIZER_STRICT_CEILING")
        )
    if "SOLARSIZER_CATALOG_FALLBACK" in env:
        policy = replace(policy, catalog_fallback=env["SOLARSIZER_CATALOG_FALLBACK"].strip())
    if "SOLARSIZER_BATTERY_EFFICIENCY" in env:
        policy = replace(
            policy,
            apply_battery_efficiency_factor=parse_bool(
                env["SOLARSIZER_BATTERY_EFFICIENCY"], "SOLARSIZER_BATTERY_EFFICIENCY"
            ),
        )
    return policy


def load_policy(config_path: Path | None = None, use_env: bool = True) -> SizingPolicy:
    """Load the sizing policy from YAML, then environment overrides.

    A missing config file gives the defaults.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    data = {}
    if Path(path).exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}

    policy = policy_from_dict(data.get("policy"))
    if use_env:
        load_dotenv()
        policy = apply_env_overrides(policy)
    return policy

"""Tests for sizing policy configuration."""

import pytest
from solarsizer.config import SizingPolicy, load_policy, policy_from_dict


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SOLARSIZER_STRICT_CEILING", "SOLARSIZER_CATALOG_FALLBACK", "SOLARSIZER_BATTERY_EFFICIENCY"):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.setattr("solarsizer.config.load_dotenv", lambda: None)


def test_defaults():
    policy = SizingPolicy()
    assert policy.strict_ceiling is False
    assert policy.catalog_fallback == "fail"
    assert policy.apply_battery_efficiency_factor is True


def test_invalid_fallback():
    with pytest.raises(ValueError):
        SizingPolicy(catalog_fallback="nearest")


def test_policy_from_dict():
    policy = policy_from_dict(
        {"strict_ceiling": "yes", "catalog_fallback": "closest-match", "apply_battery_efficiency_factor": False}
    )
    assert policy == SizingPolicy(True, "closest-match", False)


def test_policy_from_dict_bad_bool():
    with pytest.raises(ValueError):
        policy_from_dict({"strict_ceiling": "maybe"})


def test_load_policy_from_yaml(tmp_path):
    path = tmp_path / "sizing.yaml"
    path.write_text("policy:\n  strict_ceiling: true\n  catalog_fallback: closest-match\n")
    policy = load_policy(path)
    assert policy.strict_ceiling is True
    assert policy.catalog_fallback == "closest-match"
    assert policy.apply_battery_efficiency_factor is True


def test_missing_file_gives_defaults(tmp_path):
    assert load_policy(tmp_path / "missing.yaml") == SizingPolicy()


def test_bundled_config_matches_defaults():
    assert load_policy() == SizingPolicy()


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("SOLARSIZER_STRICT_CEILING", "1")
    monkeypatch.setenv("SOLARSIZER_CATALOG_FALLBACK", "closest-match")
    monkeypatch.setenv("SOLARSIZER_BATTERY_EFFICIENCY", "off")
    policy = load_policy(tmp_path / "missing.yaml")
    assert policy == SizingPolicy(True, "closest-match", False)

    assert load_policy(tmp_path / "missing.yaml", use_env=False) == SizingPolicy()

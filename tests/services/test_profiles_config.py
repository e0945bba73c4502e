from __future__ import annotations

from pathlib import Path

import pytest

from chronopilot.core.errors import ConfigError
from chronopilot.core.profiles import expand_env, get_profile, load_profiles


def test_bundled_profiles_load() -> None:
    profiles = load_profiles()

    monthly = profiles["monthly"]
    assert monthly.static_tables == ["raw_data", "gesamtzeiten", "urlaubsantraege", "daily_summary"]
    assert monthly.dynamic_tables is not None
    assert monthly.dynamic_tables.rpc == "get_dynamic_tables"
    assert monthly.post_run_rpcs == ["update_monthly_freizeitkonto"]
    assert "baustellenzeit" in profiles["reports"].static_tables
    assert profiles["offline"].mail.enabled is False


def test_expand_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUCKET_NAME", "monatsberichte")
    assert expand_env("${BUCKET_NAME}") == "monatsberichte"
    assert expand_env("plain") == "plain"


def test_expand_env_missing_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EMAIL_TO", raising=False)
    with pytest.raises(ConfigError, match="EMAIL_TO"):
        expand_env("${EMAIL_TO}")


def test_unknown_profile() -> None:
    with pytest.raises(ConfigError, match="monthly"):
        get_profile("yearly")


def test_invalid_profile_is_config_error(tmp_path: Path) -> None:
    config = tmp_path / "profiles.yaml"
    config.write_text("profiles:\n  broken:\n    render:\n      workers: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="broken"):
        load_profiles(config)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_profiles(tmp_path / "missing.yaml")

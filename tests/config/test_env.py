from __future__ import annotations

import pytest

from campaignsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_flag,
    env_float,
    env_list,
    optional_env_var,
    require_env_vars,
)


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRESENT", " value ")
    monkeypatch.setenv("BLANK", "   ")
    monkeypatch.delenv("ABSENT", raising=False)

    with pytest.raises(MissingConfigurationError, match="ABSENT, BLANK"):
        require_env_vars(("PRESENT", "BLANK", "ABSENT"))

    assert require_env_vars(("PRESENT",)) == {"PRESENT": "value"}


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAYBE", "  ")
    assert optional_env_var("MAYBE") is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("TRUE", True), (" on ", True), ("0", False), ("no", False), ("", False)],
)
def test_env_flag(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("FLAG", raw)
    assert env_flag("FLAG") is expected


def test_env_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAG", "maybe")
    with pytest.raises(ConfigurationError, match="Invalid boolean"):
        env_flag("FLAG")


def test_env_float(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TIMEOUT", raising=False)
    assert env_float("TIMEOUT", default=3.0) == 3.0

    monkeypatch.setenv("TIMEOUT", "12.5")
    assert env_float("TIMEOUT") == 12.5

    monkeypatch.setenv("TIMEOUT", "-1")
    with pytest.raises(ConfigurationError, match="must be positive"):
        env_float("TIMEOUT")

    monkeypatch.setenv("TIMEOUT", "soon")
    with pytest.raises(ConfigurationError, match="Invalid number"):
        env_float("TIMEOUT")


def test_env_list_splits_and_strips(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ITEMS", " Email , Campaign,,")
    assert env_list("ITEMS") == ("Email", "Campaign")

    monkeypatch.setenv("ITEMS", "duplicate key | PRIMARY KEY")
    assert env_list("ITEMS", separator="|") == ("duplicate key", "PRIMARY KEY")

from __future__ import annotations

import logging

import pytest

from goodsreceipt.config import (
    Backend,
    ConfigurationError,
    MissingConfigurationError,
    get_firestore_config,
    get_reconciliation_config,
    optional_env_var,
    parse_backend,
    require_env_var,
    require_env_vars,
)
from goodsreceipt.config.env import env_flag
from goodsreceipt.config.logging import DIAGNOSTICS_LOGGER, configure_logging


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"])["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert exc.value.names == ("MISSING_A", "MISSING_B")
    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_env_var_strips_and_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")
    monkeypatch.setenv("BLANK_VAR", "")

    assert optional_env_var("EXAMPLE_VAR") == "value"
    assert optional_env_var("BLANK_VAR", "fallback") == "fallback"


def test_parse_backend_is_case_insensitive() -> None:
    assert parse_backend(" FireStore ") is Backend.FIRESTORE

    with pytest.raises(ConfigurationError, match="sqlalchemy, firestore"):
        parse_backend("postgres")


def test_reconciliation_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOODSRECEIPT_BACKEND", "firestore")
    monkeypatch.setenv("GOODSRECEIPT_ORDER_PREFIX", "ZAM-")
    monkeypatch.setenv("GOODSRECEIPT_MATCH_ORDER_ID", "false")

    config = get_reconciliation_config()

    assert config.backend is Backend.FIRESTORE
    assert config.order_number_prefix == "ZAM-"
    assert config.include_order_id_variant is False


def test_reconciliation_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("GOODSRECEIPT_BACKEND", "GOODSRECEIPT_ORDER_PREFIX", "GOODSRECEIPT_MATCH_ORDER_ID"):
        monkeypatch.delenv(name, raising=False)

    config = get_reconciliation_config()

    assert config.backend is Backend.SQLALCHEMY
    assert config.order_number_prefix == "PO-"
    assert config.include_order_id_variant is True


def test_firestore_config_requires_project(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIRESTORE_PROJECT_ID", raising=False)

    with pytest.raises(MissingConfigurationError, match="FIRESTORE_PROJECT_ID"):
        get_firestore_config()


def test_firestore_config_builds_documents_root(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FIRESTORE_PROJECT_ID", "warehouse")
    monkeypatch.setenv("FIRESTORE_ACCESS_TOKEN", "token-123")
    monkeypatch.delenv("FIRESTORE_DATABASE", raising=False)
    monkeypatch.setenv("FIRESTORE_BASE_URL", "https://firestore.test/v1/")

    config = get_firestore_config()

    assert config.documents_root == (
        "https://firestore.test/v1/projects/warehouse/databases/(default)/documents"
    )
    assert config.resilience.default_headers == {"Authorization": "Bearer token-123"}
    assert config.collections.inventory_batches == "inventoryBatches"
    assert "POST" in config.resilience.retry.allowed_methods


@pytest.mark.parametrize(("raw", "expected"), [("yes", True), ("OFF", False), ("  ", True)])
def test_env_flag_reads_common_spellings(
    monkeypatch: pytest.MonkeyPatch, raw: str, *, expected: bool
) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", raw)

    assert env_flag("EXAMPLE_FLAG", default=True) is expected


def test_env_flag_rejects_other_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", "maybe")

    with pytest.raises(ConfigurationError, match="EXAMPLE_FLAG"):
        env_flag("EXAMPLE_FLAG", default=False)


def test_configure_logging_tunes_diagnostics_subtree() -> None:
    diagnostics = logging.getLogger(DIAGNOSTICS_LOGGER)
    previous = diagnostics.level
    try:
        configure_logging(diagnostics_level=logging.DEBUG)

        assert diagnostics.level == logging.DEBUG
    finally:
        diagnostics.setLevel(previous)

"""Reconciliation and backend selection defaults."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .env import env_flag, optional_env_var
from .errors import ConfigurationError

DEFAULT_ORDER_NUMBER_PREFIX = "PO-"


class Backend(StrEnum):
    SQLALCHEMY = "sqlalchemy"
    FIRESTORE = "firestore"


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    backend: Backend = Backend.SQLALCHEMY
    order_number_prefix: str = DEFAULT_ORDER_NUMBER_PREFIX
    include_order_id_variant: bool = True


def parse_backend(value: str) -> Backend:
    try:
        return Backend(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(backend.value for backend in Backend)
        raise ConfigurationError(f"Unknown backend {value!r} (expected one of: {choices})") from exc


def get_reconciliation_config() -> ReconciliationConfig:
    backend_name = optional_env_var("GOODSRECEIPT_BACKEND")
    prefix = optional_env_var("GOODSRECEIPT_ORDER_PREFIX", DEFAULT_ORDER_NUMBER_PREFIX)
    return ReconciliationConfig(
        backend=parse_backend(backend_name) if backend_name else Backend.SQLALCHEMY,
        order_number_prefix=prefix or DEFAULT_ORDER_NUMBER_PREFIX,
        include_order_id_variant=env_flag("GOODSRECEIPT_MATCH_ORDER_ID", default=True),
    )

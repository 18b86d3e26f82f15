"""Firestore document-store configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_env_var, require_env_vars
from .http_resilience import READ_METHODS, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_FIRESTORE_BASE_URL = "https://firestore.googleapis.com/v1"
DEFAULT_FIRESTORE_DATABASE = "(default)"
FIRESTORE_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True, slots=True)
class FirestoreCollections:
    """Where each document kind lives inside the database."""

    unloading_reports_parent: str | None = "Forms/RozladunekTowaru"
    unloading_reports: str = "Odpowiedzi"
    purchase_orders: str = "purchaseOrders"
    inventory_batches: str = "inventoryBatches"


@dataclass(frozen=True, slots=True)
class FirestoreConfig:
    project_id: str
    resilience: ResilienceConfig
    database: str = DEFAULT_FIRESTORE_DATABASE
    base_url: str = DEFAULT_FIRESTORE_BASE_URL
    collections: FirestoreCollections = field(default_factory=FirestoreCollections)

    @property
    def documents_root(self) -> str:
        return (
            f"{self.base_url.rstrip('/')}/projects/{self.project_id}"
            f"/databases/{self.database}/documents"
        )


def get_firestore_config(*, resilience: ResilienceConfig | None = None) -> FirestoreConfig:
    values = require_env_vars(("FIRESTORE_PROJECT_ID",))
    access_token = optional_env_var("FIRESTORE_ACCESS_TOKEN")
    headers = {"Authorization": f"Bearer {access_token}"} if access_token else None
    return FirestoreConfig(
        project_id=values["FIRESTORE_PROJECT_ID"],
        database=optional_env_var("FIRESTORE_DATABASE", DEFAULT_FIRESTORE_DATABASE)
        or DEFAULT_FIRESTORE_DATABASE,
        base_url=optional_env_var("FIRESTORE_BASE_URL", DEFAULT_FIRESTORE_BASE_URL)
        or DEFAULT_FIRESTORE_BASE_URL,
        resilience=resilience
        or ResilienceConfig(
            name="firestore",
            timeout_seconds=FIRESTORE_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            # runQuery is a read sent as POST
            retry=RetryPolicy(total=3, allowed_methods=READ_METHODS | {"POST"}),
            default_headers=headers,
        ),
    )

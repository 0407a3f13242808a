"""Order document store backed by Cloud Firestore.

One document per order in a single collection, keyed by the gateway order
id. Updates are guarded by the snapshot's `update_time` so two writers racing
on the same order cannot both succeed.
"""

from dataclasses import dataclass
from typing import Any, Protocol

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from payrelay.common.config import Settings
from payrelay.common.errors import ConfigurationError, ConcurrentUpdateError, OrderNotFoundError, StoreError

TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class StoredOrder:
    """Order document contents plus the version token used for guarded writes."""

    data: dict[str, Any]
    version: Any


class OrderStore(Protocol):
    def create(self, order_id: str, document: dict[str, Any]) -> None: ...

    def get(self, order_id: str) -> StoredOrder | None: ...

    def update(self, order_id: str, fields: dict[str, Any], expected_version: Any) -> None: ...


def firebase_app(cfg: Settings) -> firebase_admin.App:
    """Return the default Firebase app, initializing it from settings once."""

    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    missing = [
        name
        for name, value in (
            ("FIREBASE_PROJECT_ID", cfg.firebase_project_id),
            ("FIREBASE_CLIENT_EMAIL", cfg.firebase_client_email),
            ("FIREBASE_PRIVATE_KEY", cfg.firebase_private_key),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"missing Firebase credentials: {', '.join(missing)}")
    cred = credentials.Certificate(
        {
            "type": "service_account",
            "project_id": cfg.firebase_project_id,
            "client_email": cfg.firebase_client_email,
            "private_key": cfg.firebase_private_key,
            "token_uri": TOKEN_URI,
        }
    )
    return firebase_admin.initialize_app(cred, {"projectId": cfg.firebase_project_id})


class FirestoreOrderStore:
    """`OrderStore` over a Firestore collection."""

    def __init__(self, db, collection: str = "orders") -> None:
        self.db = db
        self.collection = collection

    @classmethod
    def from_settings(cls, cfg: Settings) -> "FirestoreOrderStore":
        return cls(firestore.client(firebase_app(cfg)), cfg.orders_collection)

    def _doc(self, order_id: str):
        return self.db.collection(self.collection).document(order_id)

    def create(self, order_id: str, document: dict[str, Any]) -> None:
        """Insert a new order document; never overwrites an existing id."""

        try:
            self._doc(order_id).create(document)
        except google_exceptions.GoogleAPIError as exc:
            raise StoreError("Failed to save order") from exc

    def get(self, order_id: str) -> StoredOrder | None:
        try:
            snapshot = self._doc(order_id).get()
        except google_exceptions.GoogleAPIError as exc:
            raise StoreError("Failed to load order") from exc
        if not snapshot.exists:
            return None
        return StoredOrder(data=snapshot.to_dict() or {}, version=snapshot.update_time)

    def update(self, order_id: str, fields: dict[str, Any], expected_version: Any) -> None:
        """Apply `fields` only if the document is unchanged since `expected_version`."""

        option = self.db.write_option(last_update_time=expected_version)
        try:
            self._doc(order_id).update(fields, option=option)
        except google_exceptions.NotFound as exc:
            raise OrderNotFoundError(order_id) from exc
        except google_exceptions.FailedPrecondition as exc:
            raise ConcurrentUpdateError(order_id) from exc
        except google_exceptions.GoogleAPIError as exc:
            raise StoreError("Failed to update order") from exc

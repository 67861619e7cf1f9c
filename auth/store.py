"""
auth/store.py -- MongoDB persistence layer for user records.

Pattern: Repository + Data Mapper.
UserStore is the repository; _doc_to_user is the mapper.
Route and service code never touches pymongo directly.

Document shape (kept compatible with existing collections):
  {"_id": ObjectId, "name": str, "email": str, "password": <bcrypt hash>}

Uniqueness:
  Email uniqueness is checked in code (get_by_email before create_user) and is
  NOT atomic. Two concurrent signups for the same email can both pass the
  check. ensure_unique_email_index() (EMAIL_UNIQUE_INDEX=true) adds a unique
  index on "email" so the second insert fails with DuplicateKeyError instead.

Lifecycle:
  UserStore owns one MongoClient for the lifetime of the process. pymongo
  pools connections internally, so one instance is shared by every request
  without locking. Call ping() once at startup and close() on shutdown.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection

from auth.models import User
from core.config import Settings

logger = logging.getLogger("userauth.store")


def _doc_to_user(doc: dict[str, Any]) -> User:
    return User(
        id=str(doc["_id"]),
        name=doc.get("name", ""),
        email=doc.get("email", ""),
        hashed_password=doc.get("password", ""),
    )


class UserStore:
    """Repository for User records in a single MongoDB collection.

    Usage:
        store = UserStore("mongodb://localhost:27017", "userauth", "users")
        store.ping()
        user_id = store.create_user(User(name="Ann", email="ann@x.com", hashed_password=hash_password("pw")))
        user = store.get_by_email("ann@x.com")
        store.close()

    Tests pass a ready-made client (e.g. mongomock.MongoClient()) instead of
    a URI so no server is needed.
    """

    def __init__(
        self,
        mongo_uri: str = "mongodb://localhost:27017",
        db_name: str = "userauth",
        collection_name: str = "users",
        *,
        client: Any | None = None,
        timeout_ms: int = 5000,
    ) -> None:
        self.client = client if client is not None else MongoClient(mongo_uri, serverSelectionTimeoutMS=timeout_ms)
        self.collection: Collection = self.client[db_name][collection_name]

    def ensure_unique_email_index(self) -> None:
        """Create a unique index on "email". Idempotent.

        Fails with DuplicateKeyError if the collection already holds two
        records with the same email.
        """
        self.collection.create_index([("email", ASCENDING)], unique=True, name="email_unique")

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def ping(self) -> None:
        """Round-trip to the server. Raises pymongo.errors.PyMongoError if unreachable."""
        self.client.admin.command("ping")

    def close(self) -> None:
        self.client.close()

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def get_by_email(self, email: str) -> User | None:
        """Return the user whose email matches exactly, or None."""
        doc = self.collection.find_one({"email": email})
        return _doc_to_user(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        """Return the user with the given hex id, or None.

        Malformed ids (not a 24-char hex ObjectId) are treated as not found.
        """
        try:
            oid = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        doc = self.collection.find_one({"_id": oid})
        return _doc_to_user(doc) if doc else None

    def create_user(self, user: User) -> str:
        """Insert a new user and return the store-assigned id as a hex string.

        Raises pymongo.errors.DuplicateKeyError only when the unique email
        index is enabled and the email is already taken.
        """
        result = self.collection.insert_one(
            {
                "name": user.name,
                "email": user.email,
                "password": user.hashed_password,
            }
        )
        logger.debug("Inserted user %s", result.inserted_id)
        return str(result.inserted_id)


def connect_user_store(settings: Settings) -> UserStore:
    """Build a UserStore from settings and prove the server is reachable.

    Raises pymongo.errors.PyMongoError (typically ServerSelectionTimeoutError)
    if MongoDB cannot be reached within settings.mongo_timeout_ms. The client
    is closed before the error propagates.
    """
    store = UserStore(
        settings.mongo_uri,
        settings.db_name,
        settings.collection_name,
        timeout_ms=settings.mongo_timeout_ms,
    )
    try:
        store.ping()
        if settings.email_unique_index:
            store.ensure_unique_email_index()
    except Exception:
        store.close()
        raise
    return store

"""
tests/conftest.py -- Shared test fixtures for the user service.

This module provides:
  - user_store: a UserStore backed by an in-memory mongomock client
  - client:     TestClient over create_app(user_store=user_store)
  - signup:     helper that POSTs a signup and returns the response

Design: the store is injected through create_app() the same way main.py
injects the real one, so route handlers, dependencies and exception handlers
all run exactly as in production. Each test gets a fresh mongomock client, so
no state leaks between tests.

The DEBUG env var must be set before any auth module import so get_settings()
auto-generates JWT_SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator

# CRITICAL: Set DEBUG before any auth/core import.
os.environ.setdefault("DEBUG", "true")

import mongomock
import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth.store import UserStore


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore(db_name="userauth_test", collection_name="users", client=mongomock.MongoClient())
    yield store
    store.close()


@pytest.fixture
def client(user_store: UserStore) -> Generator[TestClient, None, None]:
    app = create_app(user_store=user_store)
    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client


@pytest.fixture
def signup(client: TestClient) -> Callable:
    def _signup(name: str = "Ann", email: str = "ann@x.com", password: str = "pw123"):
        return client.post("/api/users/signup", json={"name": name, "email": email, "password": password})

    return _signup

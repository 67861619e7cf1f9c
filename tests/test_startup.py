"""
tests/test_startup.py -- Connect-before-serve startup ordering.

Covers:
  - main.main() exits with status 1 and never starts uvicorn when MongoDB is
    unreachable
  - main.main() injects the connected store into the app it serves
  - create_app() without a store connects in the lifespan, aborts startup on
    failure, and closes the store it opened on shutdown
  - an injected store is left open for its owner to close
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

import api.main
import main as entrypoint
from api.main import create_app


def _unreachable(settings):
    raise ServerSelectionTimeoutError("localhost:27017: connection refused")


class TestMainEntrypoint:
    def test_exits_when_mongo_unreachable(self, monkeypatch) -> None:
        run = MagicMock()
        monkeypatch.setattr(entrypoint, "connect_user_store", _unreachable)
        monkeypatch.setattr(entrypoint.uvicorn, "run", run)
        monkeypatch.setattr("sys.argv", ["main.py"])
        with pytest.raises(SystemExit) as exc_info:
            entrypoint.main()
        assert exc_info.value.code == 1
        run.assert_not_called()

    def test_serves_after_connect(self, monkeypatch) -> None:
        store = MagicMock()
        run = MagicMock()
        monkeypatch.setattr(entrypoint, "connect_user_store", lambda settings: store)
        monkeypatch.setattr(entrypoint.uvicorn, "run", run)
        monkeypatch.setattr("sys.argv", ["main.py", "--port", "5050"])
        entrypoint.main()
        run.assert_called_once()
        assert run.call_args.kwargs["port"] == 5050
        store.close.assert_called_once()


class TestLifespan:
    def test_startup_fails_without_database(self, monkeypatch) -> None:
        monkeypatch.setattr(api.main, "connect_user_store", _unreachable)
        with pytest.raises(ServerSelectionTimeoutError):
            with TestClient(create_app()):
                pass

    def test_lifespan_opens_and_closes_store(self, monkeypatch) -> None:
        store = MagicMock()
        monkeypatch.setattr(api.main, "connect_user_store", lambda settings: store)
        app = create_app()
        with TestClient(app):
            assert app.state.user_store is store
            store.close.assert_not_called()
        store.close.assert_called_once()

    def test_injected_store_left_open(self) -> None:
        store = MagicMock()
        with TestClient(create_app(user_store=store)):
            pass
        store.close.assert_not_called()

"""
tests/test_service.py -- register_user / login_user without HTTP.

The store is the mongomock-backed fixture except where a failure has to be
forced, in which case a MagicMock stands in.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from auth.errors import InvalidCredentialsError, UserAlreadyExistsError
from auth.service import login_user, register_user
from auth.store import UserStore
from auth.tokens import decode_access_token, verify_password


class TestRegisterUser:
    def test_returns_user_and_token(self, user_store: UserStore) -> None:
        user, token = register_user(user_store, "Ann", "ann@x.com", "pw123")
        assert user.id is not None
        assert user.name == "Ann"
        assert decode_access_token(token)["id"] == user.id

    def test_stores_hash_not_plaintext(self, user_store: UserStore) -> None:
        register_user(user_store, "Ann", "ann@x.com", "pw123")
        stored = user_store.get_by_email("ann@x.com")
        assert stored.hashed_password != "pw123"
        assert verify_password("pw123", stored.hashed_password)

    def test_duplicate_email_raises_and_keeps_one_record(self, user_store: UserStore) -> None:
        register_user(user_store, "Ann", "ann@x.com", "pw123")
        with pytest.raises(UserAlreadyExistsError) as exc_info:
            register_user(user_store, "Other Ann", "ann@x.com", "different")
        assert exc_info.value.message == "User already exists"
        assert user_store.collection.count_documents({"email": "ann@x.com"}) == 1
        assert user_store.get_by_email("ann@x.com").name == "Ann"

    def test_lost_insert_race_reported_as_duplicate(self) -> None:
        """With the unique index on, the losing insert maps to the same error."""
        store = MagicMock()
        store.get_by_email.return_value = None
        store.create_user.side_effect = DuplicateKeyError("E11000 duplicate key")
        with pytest.raises(UserAlreadyExistsError):
            register_user(store, "Ann", "ann@x.com", "pw123")

    def test_store_failure_propagates(self) -> None:
        store = MagicMock()
        store.get_by_email.side_effect = ServerSelectionTimeoutError("down")
        with pytest.raises(ServerSelectionTimeoutError):
            register_user(store, "Ann", "ann@x.com", "pw123")
        store.create_user.assert_not_called()


class TestLoginUser:
    def test_correct_credentials(self, user_store: UserStore) -> None:
        created, _ = register_user(user_store, "Ann", "ann@x.com", "pw123")
        user, token = login_user(user_store, "ann@x.com", "pw123")
        assert user.id == created.id
        assert decode_access_token(token)["id"] == created.id

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, user_store: UserStore) -> None:
        register_user(user_store, "Ann", "ann@x.com", "pw123")
        with pytest.raises(InvalidCredentialsError) as wrong_pw:
            login_user(user_store, "ann@x.com", "wrong")
        with pytest.raises(InvalidCredentialsError) as unknown:
            login_user(user_store, "bob@x.com", "pw123")
        assert wrong_pw.value.code == unknown.value.code
        assert str(wrong_pw.value) == str(unknown.value) == "Invalid email or password"

    def test_unknown_email_still_runs_bcrypt(self, user_store: UserStore) -> None:
        with patch("auth.service.burn_password_check") as burn:
            with pytest.raises(InvalidCredentialsError):
                login_user(user_store, "nobody@x.com", "pw123")
        burn.assert_called_once_with("pw123")

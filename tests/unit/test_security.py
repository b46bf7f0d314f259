# -*- coding: utf-8 -*-
"""
Unit тесты для хэширования паролей и JWT
"""

from datetime import timedelta

import pytest

from pdd_trainer.domain.enums import Role
from pdd_trainer.domain.models import User
from pdd_trainer.security.security import (create_access_token,
                                           create_user_token, hash_password,
                                           verify_password, verify_token)
from pdd_trainer.utils.exceptions import AuthenticationError


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("secret1")

        assert hashed != "secret1"
        assert verify_password("secret1", hashed)
        assert not verify_password("secret2", hashed)

    def test_verify_malformed_hash(self):
        assert verify_password("secret1", "not-a-bcrypt-hash") is False


class TestTokens:
    def test_user_token_payload(self):
        user = User(id=7, email="a@x.com", role=Role.ADMIN, is_verified=True)

        payload = verify_token(create_user_token(user))

        assert payload["sub"] == "7"
        assert payload["email"] == "a@x.com"
        assert payload["role"] == "admin"
        assert payload["verified"] is True

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-10))

        with pytest.raises(AuthenticationError):
            verify_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthenticationError):
            verify_token("garbage")

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from bson import ObjectId

from todo_api.auth import extract_token
from todo_api.auth_service import hash_password, verify_password
from todo_api.errors import AuthError
from todo_api.tokens import JWT_ALGORITHM, TokenService

SECRET = "unit-secret"


class TestTokenService:
    def test_issue_and_verify(self):
        user_id = str(ObjectId())
        service = TokenService(SECRET, 3600)
        assert service.verify(service.issue(user_id)) == user_id

    def test_expiry_claim(self):
        service = TokenService(SECRET, 120)
        payload = jwt.decode(service.issue("abc"), SECRET, algorithms=[JWT_ALGORITHM])
        assert payload["exp"] - payload["iat"] == 120

    def test_expired_token(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"id": "abc", "iat": past, "exp": past + timedelta(hours=1)}, SECRET, algorithm=JWT_ALGORITHM
        )
        with pytest.raises(AuthError):
            TokenService(SECRET, 3600).verify(token)

    def test_missing_id_claim(self):
        token = jwt.encode(
            {"exp": datetime.now(timezone.utc) + timedelta(hours=1)}, SECRET, algorithm=JWT_ALGORITHM
        )
        with pytest.raises(AuthError):
            TokenService(SECRET, 3600).verify(token)

    def test_wrong_secret(self):
        token = TokenService("other", 3600).issue("abc")
        with pytest.raises(AuthError) as exc_info:
            TokenService(SECRET, 3600).verify(token)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid token"


class TestExtractToken:
    def test_bearer_prefix_is_stripped(self):
        assert extract_token("Bearer abc.def") == "abc.def"

    def test_raw_value_is_used(self):
        assert extract_token("abc.def") == "abc.def"

    @pytest.mark.parametrize("value", [None, "", "   ", "Bearer "])
    def test_missing(self, value):
        with pytest.raises(AuthError):
            extract_token(value)


class TestPasswords:
    def test_hash_is_salted(self):
        first, second = hash_password("secret1"), hash_password("secret1")
        assert first != second
        assert verify_password("secret1", first)
        assert verify_password("secret1", second)

    def test_wrong_password(self):
        assert not verify_password("secret2", hash_password("secret1"))

    def test_malformed_hash_never_matches(self):
        assert not verify_password("secret1", "not-a-bcrypt-hash")

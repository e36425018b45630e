from __future__ import annotations

import pytest
from jose import jwt
from starlette.requests import Request

from stockdash.api.auth import (
    ALGORITHM,
    TokenPayload,
    authenticate,
    create_token,
    decode_token,
    extract_token,
    hash_password,
    verify_password,
)
from stockdash.errors import InvalidToken, Unauthenticated

SECRET = "test-secret"


def _request(headers: dict[str, str] | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/api/predictions", "headers": raw})


class TestPasswords:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong", hashed)

    def test_empty_or_garbage_hash(self) -> None:
        assert not verify_password("x", "")
        assert not verify_password("x", "not-a-bcrypt-hash")


class TestTokens:
    def test_round_trip_carries_user_id(self) -> None:
        token = create_token(42, SECRET, expiry_hours=1)
        assert decode_token(token, SECRET) == TokenPayload(user_id=42)

    def test_expired_token(self) -> None:
        token = create_token(42, SECRET, expiry_hours=-1)
        with pytest.raises(InvalidToken):
            decode_token(token, SECRET)

    def test_wrong_secret(self) -> None:
        token = create_token(42, SECRET, expiry_hours=1)
        with pytest.raises(InvalidToken):
            decode_token(token, "other-secret")

    def test_garbage_token(self) -> None:
        with pytest.raises(InvalidToken):
            decode_token("not.a.jwt", SECRET)

    def test_token_without_subject(self) -> None:
        token = jwt.encode({"foo": "bar"}, SECRET, algorithm=ALGORITHM)
        with pytest.raises(InvalidToken):
            decode_token(token, SECRET)


class TestExtractToken:
    def test_from_header(self) -> None:
        assert extract_token(_request({"Authorization": "Bearer abc"})) == "abc"

    def test_scheme_is_case_insensitive(self) -> None:
        assert extract_token(_request({"Authorization": "bearer abc"})) == "abc"

    def test_from_cookie(self) -> None:
        assert extract_token(_request({"Cookie": "token=xyz"})) == "xyz"

    def test_header_wins_over_cookie(self) -> None:
        req = _request({"Authorization": "Bearer abc", "Cookie": "token=xyz"})
        assert extract_token(req) == "abc"

    def test_non_bearer_header_falls_back_to_cookie(self) -> None:
        req = _request({"Authorization": "Basic dXNlcjpwYXNz", "Cookie": "token=xyz"})
        assert extract_token(req) == "xyz"

    def test_none_when_absent(self) -> None:
        assert extract_token(_request()) is None


class TestAuthenticate:
    def test_no_token(self) -> None:
        with pytest.raises(Unauthenticated):
            authenticate(_request(), SECRET)

    def test_invalid_token(self) -> None:
        with pytest.raises(InvalidToken):
            authenticate(_request({"Authorization": "Bearer nope"}), SECRET)

    def test_valid_token(self) -> None:
        token = create_token(9, SECRET, expiry_hours=1)
        payload = authenticate(_request({"Authorization": f"Bearer {token}"}), SECRET)
        assert payload.user_id == 9

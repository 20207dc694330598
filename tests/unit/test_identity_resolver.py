"""
Identity resolver tests.

Bearer credentials win over session artifacts; malformed material never raises.
"""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import Mock
from urllib.parse import quote
from uuid import uuid4

import pytest

from portal.adapters.auth.jwt_identity import JWTIdentityService
from portal.api.auth_utils import create_access_token
from portal.components.identity import (
    BearerCredentialStrategy,
    Credentials,
    ResolveIdentityInput,
    SessionArtifactStrategy,
    default_strategies,
    run,
    run_resolve,
)

USER_ID = uuid4()
OTHER_ID = uuid4()


@pytest.fixture
def verifier():
    tokens = {"good-token": USER_ID, "other-token": OTHER_ID}
    v = Mock()
    v.verify_access_token.side_effect = lambda token: tokens.get(token)
    return v


@pytest.fixture
def strategies(verifier, rules):
    return default_strategies(verifier, rules.identity)


def resolve(strategies, authorization=None, cookies=None):
    creds = Credentials(authorization=authorization, cookies=cookies or {})
    return run_resolve(ResolveIdentityInput(credentials=creds), strategies)


def test_bearer_header(strategies):
    result = resolve(strategies, authorization="Bearer good-token")

    assert result.success
    assert result.identity == USER_ID
    assert result.strategy == "bearer"


def test_bearer_header_invalid_token(strategies):
    result = resolve(strategies, authorization="Bearer forged")

    assert not result.success
    assert result.identity is None


def test_header_without_bearer_scheme_is_ignored(strategies, verifier):
    result = resolve(strategies, authorization="good-token")

    assert result.identity is None
    verifier.verify_access_token.assert_not_called()


def test_bearer_cookie(strategies):
    result = resolve(strategies, cookies={"access_token": "Bearer good-token"})

    assert result.identity == USER_ID
    assert result.strategy == "bearer"


def test_session_cookie_json_user_id(strategies, verifier):
    cookie = json.dumps({"user": {"id": str(USER_ID)}})

    result = resolve(strategies, cookies={"sb-auth-token": cookie})

    assert result.identity == USER_ID
    assert result.strategy == "session"
    verifier.verify_access_token.assert_not_called()


def test_session_cookie_url_encoded(strategies):
    cookie = quote(json.dumps({"user": {"id": str(USER_ID)}}))

    result = resolve(strategies, cookies={"sb-auth-token": cookie})

    assert result.identity == USER_ID


def test_session_cookie_fallback_name(strategies):
    cookie = json.dumps({"user": {"id": str(USER_ID)}})

    result = resolve(strategies, cookies={"sb-abcdef-auth-token": cookie})

    assert result.identity == USER_ID


def test_session_cookie_unrelated_name_ignored(strategies):
    cookie = json.dumps({"user": {"id": str(USER_ID)}})

    result = resolve(strategies, cookies={"theme": cookie, "sb-prefs": cookie})

    assert result.identity is None


def test_session_cookie_raw_token(strategies):
    result = resolve(strategies, cookies={"sb-auth-token": "good-token"})

    assert result.identity == USER_ID
    assert result.strategy == "session"


def test_session_cookie_access_token_field(strategies):
    cookie = json.dumps({"access_token": "good-token"})

    result = resolve(strategies, cookies={"sb-auth-token": cookie})

    assert result.identity == USER_ID


def test_session_cookie_bad_user_id_falls_back_to_access_token(strategies):
    cookie = json.dumps({"user": {"id": "not-a-uuid"}, "access_token": "other-token"})

    result = resolve(strategies, cookies={"sb-auth-token": cookie})

    assert result.identity == OTHER_ID


@pytest.mark.parametrize(
    "cookie",
    [
        "[1, 2, 3]",
        '{"user": "nobody"}',
        '{"user": {"id": 42}}',
        "{not json",
        "",
    ],
)
def test_malformed_session_cookie_is_negative(strategies, cookie):
    result = resolve(strategies, cookies={"sb-auth-token": cookie})

    assert result.identity is None
    assert result.success is False


def test_bearer_takes_precedence_over_session(strategies):
    cookie = json.dumps({"user": {"id": str(OTHER_ID)}})

    result = resolve(
        strategies, authorization="Bearer good-token", cookies={"sb-auth-token": cookie}
    )

    assert result.identity == USER_ID
    assert result.strategy == "bearer"


def test_invalid_bearer_falls_through_to_session(strategies):
    cookie = json.dumps({"user": {"id": str(OTHER_ID)}})

    result = resolve(strategies, authorization="Bearer forged", cookies={"sb-auth-token": cookie})

    assert result.identity == OTHER_ID
    assert result.strategy == "session"


def test_no_credentials(strategies):
    assert resolve(strategies).identity is None


def test_custom_strategy_order(verifier):
    session = SessionArtifactStrategy(verifier)
    bearer = BearerCredentialStrategy(verifier)
    cookie = json.dumps({"user": {"id": str(OTHER_ID)}})
    creds = Credentials(authorization="Bearer good-token", cookies={"sb-auth-token": cookie})

    result = run(ResolveIdentityInput(credentials=creds), strategies=[session, bearer])

    assert result.identity == OTHER_ID


# --- JWT verification ---


class TestJWTIdentityService:
    SECRET = "unit-test-secret"

    def test_valid_token(self):
        token = create_access_token({"sub": str(USER_ID)}, self.SECRET)

        assert JWTIdentityService(self.SECRET).verify_access_token(token) == USER_ID

    def test_wrong_secret(self):
        token = create_access_token({"sub": str(USER_ID)}, "another-secret")

        assert JWTIdentityService(self.SECRET).verify_access_token(token) is None

    def test_expired(self):
        issued = datetime.now(UTC) - timedelta(hours=2)
        token = create_access_token(
            {"sub": str(USER_ID)},
            self.SECRET,
            expires_delta=timedelta(minutes=5),
            now_utc=issued,
        )

        assert JWTIdentityService(self.SECRET).verify_access_token(token) is None

    def test_non_uuid_subject(self):
        token = create_access_token({"sub": "admin"}, self.SECRET)

        assert JWTIdentityService(self.SECRET).verify_access_token(token) is None

    def test_garbage(self):
        assert JWTIdentityService(self.SECRET).verify_access_token("a.b.c") is None

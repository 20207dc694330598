"""
Identity component - resolve the acting identity from request credentials.

Strategies run in order (bearer credential, then session artifact); the first
one that yields an identity wins. Unparseable or unverifiable material is a
negative result, never an exception.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import unquote
from uuid import UUID

from portal.rules.models import IdentityRules

from .models import Credentials, IdentityOutput, ResolveIdentityInput
from .ports import CredentialStrategy, IdentityServicePort

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


def _strip_bearer(value: str | None) -> str | None:
    if value and value.startswith(_BEARER_PREFIX):
        token = value[len(_BEARER_PREFIX):].strip()
        return token or None
    return None


def _as_uuid(value: Any) -> UUID | None:
    if not isinstance(value, str):
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


class BearerCredentialStrategy:
    """Authorization header `Bearer <token>`, else the bearer cookie, verified by the verifier."""

    name = "bearer"

    def __init__(self, verifier: IdentityServicePort, cookie_name: str = "access_token") -> None:
        self.verifier = verifier
        self.cookie_name = cookie_name

    def resolve(self, credentials: Credentials) -> UUID | None:
        token = _strip_bearer(credentials.authorization)
        if token is None:
            token = _strip_bearer(credentials.cookies.get(self.cookie_name))
        if token is None:
            return None
        return self.verifier.verify_access_token(token)


class SessionArtifactStrategy:
    """
    Session cookie carrying either a JSON session (`{"user": {"id": ...}}`)
    or a raw access token.
    """

    name = "session"

    def __init__(
        self,
        verifier: IdentityServicePort,
        cookie_names: Sequence[str] = ("sb-auth-token",),
        fallback_prefix: str = "sb-",
        fallback_contains: str = "auth",
    ) -> None:
        self.verifier = verifier
        self.cookie_names = tuple(cookie_names)
        self.fallback_prefix = fallback_prefix
        self.fallback_contains = fallback_contains

    def _find_cookie(self, cookies: Any) -> str | None:
        for name in self.cookie_names:
            if cookies.get(name):
                return str(cookies[name])

        for name, value in cookies.items():
            if (
                value
                and name.startswith(self.fallback_prefix)
                and self.fallback_contains in name
            ):
                return str(value)
        return None

    def resolve(self, credentials: Credentials) -> UUID | None:
        raw = self._find_cookie(credentials.cookies)
        if raw is None:
            return None

        value = unquote(raw)
        try:
            session = json.loads(value)
        except ValueError:
            # Not JSON: the cookie holds the access token itself
            return self.verifier.verify_access_token(value)

        if not isinstance(session, dict):
            return None

        user = session.get("user")
        if isinstance(user, dict):
            identity = _as_uuid(user.get("id"))
            if identity is not None:
                return identity

        access_token = session.get("access_token")
        if isinstance(access_token, str) and access_token:
            return self.verifier.verify_access_token(access_token)
        return None


def default_strategies(
    verifier: IdentityServicePort, rules: IdentityRules
) -> list[CredentialStrategy]:
    """Bearer first, then session artifact."""
    return [
        BearerCredentialStrategy(verifier, cookie_name=rules.bearer_cookie_name),
        SessionArtifactStrategy(
            verifier,
            cookie_names=rules.session_cookie.names,
            fallback_prefix=rules.session_cookie.fallback_prefix,
            fallback_contains=rules.session_cookie.fallback_contains,
        ),
    ]


def run_resolve(
    inp: ResolveIdentityInput,
    strategies: Sequence[CredentialStrategy],
) -> IdentityOutput:
    for strategy in strategies:
        identity = strategy.resolve(inp.credentials)
        if identity is not None:
            return IdentityOutput(identity=identity, strategy=strategy.name, success=True)

    logger.debug("No identity resolved from %d strategies", len(strategies))
    return IdentityOutput(success=False)


def run(
    inp: ResolveIdentityInput,
    *,
    strategies: Sequence[CredentialStrategy],
) -> IdentityOutput:
    return run_resolve(inp, strategies)

import os
from functools import lru_cache
from pathlib import Path
from uuid import UUID

from fastapi import Depends, Request

from portal.adapters.auth.jwt_identity import JWTIdentityService
from portal.adapters.clock import SystemClock
from portal.adapters.sqlite.repos import (
    SQLiteCommunityRepo,
    SQLiteInviteRepo,
    SQLiteMemberRepo,
    SQLiteNotificationRepo,
)
from portal.components.identity import (
    CredentialStrategy,
    Credentials,
    ResolveIdentityInput,
    default_strategies,
    run_resolve,
)
from portal.domain.policy import PolicyEngine
from portal.rules.loader import load_rules
from portal.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("PORTAL_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "portal.db")
        self.rules_path = Path(os.environ.get("PORTAL_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = str(self.base_dir / "migrations")
        self.secret_key = os.environ.get("PORTAL_SECRET_KEY", "dev-secret-unsafe")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Repos ---
def get_member_repo(settings: Settings = Depends(get_settings)) -> SQLiteMemberRepo:
    return SQLiteMemberRepo(settings.db_path)


def get_community_repo(settings: Settings = Depends(get_settings)) -> SQLiteCommunityRepo:
    return SQLiteCommunityRepo(settings.db_path)


def get_invite_repo(settings: Settings = Depends(get_settings)) -> SQLiteInviteRepo:
    return SQLiteInviteRepo(settings.db_path)


def get_notification_repo(settings: Settings = Depends(get_settings)) -> SQLiteNotificationRepo:
    return SQLiteNotificationRepo(settings.db_path)


# --- Services ---
def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Identity ---
def get_identity_service(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> JWTIdentityService:
    return JWTIdentityService(settings.secret_key, algorithm=rules.identity.jwt_algorithm)


def get_credential_strategies(
    verifier: JWTIdentityService = Depends(get_identity_service),
    rules: Rules = Depends(get_rules),
) -> list[CredentialStrategy]:
    return default_strategies(verifier, rules.identity)


def get_identity(
    request: Request,
    strategies: list[CredentialStrategy] = Depends(get_credential_strategies),
) -> UUID | None:
    """
    Resolve the acting identity from the request, or None.

    Routes hand None to the components, which answer `unauthenticated`.
    """
    credentials = Credentials(
        authorization=request.headers.get("authorization"),
        cookies=dict(request.cookies),
    )
    return run_resolve(ResolveIdentityInput(credentials=credentials), strategies).identity

from datetime import timedelta
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from portal.adapters.sqlite.repos import SQLiteCommunityRepo, SQLiteInviteRepo, SQLiteMemberRepo
from portal.api.auth_utils import create_access_token
from portal.api.deps import Settings, get_settings
from portal.api.main import app
from portal.domain.entities import Community, Member

TEST_SECRET = "api-test-secret"
ROOT = Path(__file__).resolve().parent.parent.parent


@pytest.fixture
def override_settings(db_path, tmp_path):
    def _settings():
        s = Settings()
        s.data_dir = tmp_path
        s.db_path = db_path
        s.rules_path = ROOT / "rules.yaml"
        s.migrations_dir = str(ROOT / "migrations")
        s.secret_key = TEST_SECRET
        return s

    app.dependency_overrides[get_settings] = _settings
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_settings):
    return TestClient(app)


@pytest.fixture
def auth():
    """Build an Authorization header for a member id."""

    def _auth(member_id):
        token = create_access_token(
            {"sub": str(member_id)}, TEST_SECRET, expires_delta=timedelta(hours=1)
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth


@pytest.fixture
def communities(db_path):
    return SQLiteCommunityRepo(db_path)


@pytest.fixture
def members(db_path):
    return SQLiteMemberRepo(db_path)


@pytest.fixture
def invites(db_path):
    return SQLiteInviteRepo(db_path)


@pytest.fixture
def club(communities):
    return communities.save(Community(name="Eastside Cycling", logo_url="/logo.png"))


@pytest.fixture
def admin(members, club):
    return members.save(
        Member(id=uuid4(), email="captain@example.com", role="admin", community_id=club.id)
    )


@pytest.fixture
def superadmin(members):
    return members.save(Member(id=uuid4(), email="root@example.com", role="superadmin"))


@pytest.fixture
def rider(members):
    return members.save(Member(id=uuid4(), email="rider@example.com", role="financial"))

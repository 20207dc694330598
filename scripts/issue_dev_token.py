#!/usr/bin/env python3
"""
Dev token script.

Applies migrations, upserts a member (optionally creating its community) and
prints a bearer token signed with PORTAL_SECRET_KEY for manual API testing.

Usage:
    python scripts/issue_dev_token.py --email a@example.com --role admin --community "Club"
    python scripts/issue_dev_token.py --email root@example.com --role superadmin
    python scripts/issue_dev_token.py --member-id <uuid>          # token only
"""

from __future__ import annotations

import argparse
import os
import sys
from datetime import timedelta
from pathlib import Path
from uuid import UUID, uuid4

from portal.adapters.sqlite.migrator import SQLiteMigrator
from portal.adapters.sqlite.repos import SQLiteCommunityRepo, SQLiteMemberRepo
from portal.api.auth_utils import ACCESS_TOKEN_EXPIRE_MINUTES, create_access_token
from portal.domain.entities import Community, Member, MemberRole

DEFAULT_DATA_DIR = os.environ.get("PORTAL_DATA_DIR", "./data")
DB_FILENAME = "portal.db"


def seed_member(db_path: str, email: str, role: MemberRole, community_name: str | None) -> Member:
    community_id = None
    if community_name:
        community = SQLiteCommunityRepo(db_path).save(Community(name=community_name))
        community_id = community.id

    member = Member(id=uuid4(), email=email, role=role, community_id=community_id)
    return SQLiteMemberRepo(db_path).save(member)


def main() -> int:
    parser = argparse.ArgumentParser(description="Issue a development bearer token")
    parser.add_argument("--data-dir", default=DEFAULT_DATA_DIR)
    parser.add_argument("--migrations", default="migrations")
    parser.add_argument("--member-id", type=UUID, help="Existing member; skips seeding")
    parser.add_argument("--email", default="dev@example.com")
    parser.add_argument(
        "--role",
        default="financial",
        choices=["admin", "financial", "non_financial", "superadmin"],
    )
    parser.add_argument("--community", help="Create a community and place the member in it")
    parser.add_argument("--minutes", type=int, default=ACCESS_TOKEN_EXPIRE_MINUTES)
    args = parser.parse_args()

    secret_key = os.environ.get("PORTAL_SECRET_KEY", "dev-secret-unsafe")

    member_id = args.member_id
    if member_id is None:
        data_dir = Path(args.data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        db_path = str(data_dir / DB_FILENAME)
        SQLiteMigrator(db_path, args.migrations).run_migrations()

        member = seed_member(db_path, args.email, args.role, args.community)
        member_id = member.id
        print(f"Seeded member {member.id} ({member.role}) in {db_path}", file=sys.stderr)
        if member.community_id:
            print(f"Community: {member.community_id}", file=sys.stderr)

    token = create_access_token(
        {"sub": str(member_id)},
        secret_key,
        expires_delta=timedelta(minutes=args.minutes),
    )
    print(token)
    return 0


if __name__ == "__main__":
    sys.exit(main())

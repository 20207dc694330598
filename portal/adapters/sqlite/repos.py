"""
SQLite repository adapters.

Each repository opens a short-lived connection per call. Driver errors are
translated into the StoreError hierarchy from portal.ports.repo.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from portal.domain.entities import Community, Invite, Member, Notification
from portal.ports.repo import StoreConflictError, StoreError, StoreUnavailableError

# Fixed-width UTC timestamps keep lexicographic and chronological order equal
_TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def format_ts(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).strftime(_TS_FORMAT)


def parse_ts(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def parse_uuid(s: str | None) -> UUID | None:
    return UUID(s) if s else None


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    table = ""

    def __init__(self, db_path: str, timeout: float = 30.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, rollback and translate on failure."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Cannot open {self.db_path}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "UNIQUE" in str(e):
                raise StoreConflictError(self.table, str(e)) from e
            raise StoreError(f"Integrity error on {self.table}: {e}") from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreUnavailableError(f"Statement on {self.table} failed: {e}") from e
        finally:
            conn.close()


class SQLiteCommunityRepo(SQLiteRepoBase):
    table = "communities"

    def get_by_id(self, community_id: UUID) -> Community | None:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM communities WHERE id = ?", (str(community_id),)
            ).fetchone()
            return self._map_row(row) if row else None

    def save(self, community: Community) -> Community:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO communities (id, name, logo_url, favicon_url, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    logo_url=excluded.logo_url,
                    favicon_url=excluded.favicon_url,
                    updated_at=excluded.updated_at
                """,
                (
                    str(community.id),
                    community.name,
                    community.logo_url,
                    community.favicon_url,
                    format_ts(community.created_at),
                    format_ts(community.updated_at),
                ),
            )
        return community

    def delete(self, community_id: UUID) -> bool:
        with self._session() as conn:
            cursor = conn.execute("DELETE FROM communities WHERE id = ?", (str(community_id),))
            return cursor.rowcount == 1

    def list_all(self) -> list[Community]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM communities ORDER BY name").fetchall()
            return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> Community:
        return Community(
            id=UUID(row["id"]),
            name=row["name"],
            logo_url=row["logo_url"],
            favicon_url=row["favicon_url"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLiteMemberRepo(SQLiteRepoBase):
    table = "members"

    def get_by_id(self, member_id: UUID) -> Member | None:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM members WHERE id = ?", (str(member_id),)).fetchone()
            return self._map_row(row) if row else None

    def insert(self, member: Member) -> Member:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO members (
                    id, email, first_name, last_name, role, status,
                    community_id, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._params(member),
            )
        return member

    def save(self, member: Member) -> Member:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO members (
                    id, email, first_name, last_name, role, status,
                    community_id, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    first_name=excluded.first_name,
                    last_name=excluded.last_name,
                    role=excluded.role,
                    status=excluded.status,
                    community_id=excluded.community_id,
                    updated_at=excluded.updated_at
                """,
                self._params(member),
            )
        return member

    @staticmethod
    def _params(member: Member) -> tuple[Any, ...]:
        return (
            str(member.id),
            member.email,
            member.first_name,
            member.last_name,
            member.role,
            member.status,
            str(member.community_id) if member.community_id else None,
            format_ts(member.created_at),
            format_ts(member.updated_at),
        )

    def set_community(self, member_id: UUID, community_id: UUID, now_utc: datetime) -> bool:
        with self._session() as conn:
            cursor = conn.execute(
                "UPDATE members SET community_id = ?, updated_at = ? WHERE id = ?",
                (str(community_id), format_ts(now_utc), str(member_id)),
            )
            return cursor.rowcount == 1

    def list_by_community(self, community_id: UUID) -> list[Member]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM members WHERE community_id = ? ORDER BY last_name, first_name",
                (str(community_id),),
            ).fetchall()
            return [self._map_row(r) for r in rows]

    def list_all(self) -> list[Member]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM members ORDER BY email").fetchall()
            return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> Member:
        return Member(
            id=UUID(row["id"]),
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            role=row["role"],
            status=row["status"],
            community_id=parse_uuid(row["community_id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLiteInviteRepo(SQLiteRepoBase):
    table = "community_invites"

    def insert(self, invite: Invite) -> Invite:
        # Plain INSERT: a duplicate token must fail, never upsert
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO community_invites (
                    id, community_id, invite_token, expires_at, used,
                    created_by, used_by, used_at, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(invite.id),
                    str(invite.community_id),
                    invite.invite_token,
                    format_ts(invite.expires_at) if invite.expires_at else None,
                    int(invite.used),
                    str(invite.created_by) if invite.created_by else None,
                    str(invite.used_by) if invite.used_by else None,
                    format_ts(invite.used_at) if invite.used_at else None,
                    format_ts(invite.created_at),
                ),
            )
        return invite

    def get_by_token(self, token: str) -> Invite | None:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM community_invites WHERE invite_token = ?", (token,)
            ).fetchone()
            return self._map_row(row) if row else None

    def claim(
        self, token: str, member_id: UUID, now_utc: datetime, enforce_expiry: bool
    ) -> Invite | None:
        now_ts = format_ts(now_utc)
        query = """
            UPDATE community_invites
            SET used = 1, used_by = ?, used_at = ?
            WHERE invite_token = ? AND used = 0
        """
        params: list[Any] = [str(member_id), now_ts, token]
        if enforce_expiry:
            query += " AND (expires_at IS NULL OR expires_at > ?)"
            params.append(now_ts)
        query += " RETURNING *"

        with self._session() as conn:
            # Drain the cursor so the UPDATE completes before commit
            rows = conn.execute(query, params).fetchall()
            return self._map_row(rows[0]) if rows else None

    def release(self, invite_id: UUID) -> bool:
        with self._session() as conn:
            cursor = conn.execute(
                """
                UPDATE community_invites
                SET used = 0, used_by = NULL, used_at = NULL
                WHERE id = ? AND used = 1
                """,
                (str(invite_id),),
            )
            return cursor.rowcount == 1

    def list_pending(self, community_id: UUID, now_utc: datetime, limit: int) -> list[Invite]:
        with self._session() as conn:
            # Pending = not used AND not expired
            rows = conn.execute(
                """
                SELECT * FROM community_invites
                WHERE community_id = ? AND used = 0
                  AND (expires_at IS NULL OR expires_at > ?)
                ORDER BY created_at DESC
                LIMIT ?
                """,
                (str(community_id), format_ts(now_utc), limit),
            ).fetchall()
            return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> Invite:
        return Invite(
            id=UUID(row["id"]),
            community_id=UUID(row["community_id"]),
            invite_token=row["invite_token"],
            expires_at=parse_ts(row["expires_at"]),
            used=bool(row["used"]),
            created_by=parse_uuid(row["created_by"]),
            used_by=parse_uuid(row["used_by"]),
            used_at=parse_ts(row["used_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteNotificationRepo(SQLiteRepoBase):
    table = "notifications"

    def insert(self, notification: Notification) -> Notification:
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO notifications (
                    id, member_id, title, content, type, link, is_read, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(notification.id),
                    str(notification.member_id),
                    notification.title,
                    notification.content,
                    notification.type,
                    notification.link,
                    int(notification.is_read),
                    format_ts(notification.created_at),
                ),
            )
        return notification

    def list_for_member(
        self, member_id: UUID, unread_only: bool = False, limit: int = 100
    ) -> list[Notification]:
        query = "SELECT * FROM notifications WHERE member_id = ?"
        if unread_only:
            query += " AND is_read = 0"
        query += " ORDER BY created_at DESC LIMIT ?"

        with self._session() as conn:
            rows = conn.execute(query, (str(member_id), limit)).fetchall()
            return [self._map_row(r) for r in rows]

    def mark_read(self, notification_id: UUID, member_id: UUID) -> bool:
        # Scoped to the owner: another member's notification matches nothing
        with self._session() as conn:
            cursor = conn.execute(
                "UPDATE notifications SET is_read = 1 WHERE id = ? AND member_id = ?",
                (str(notification_id), str(member_id)),
            )
            return cursor.rowcount == 1

    def mark_all_read(self, member_id: UUID) -> int:
        with self._session() as conn:
            cursor = conn.execute(
                "UPDATE notifications SET is_read = 1 WHERE member_id = ? AND is_read = 0",
                (str(member_id),),
            )
            return cursor.rowcount

    def _map_row(self, row: dict[str, Any]) -> Notification:
        return Notification(
            id=UUID(row["id"]),
            member_id=UUID(row["member_id"]),
            title=row["title"],
            content=row["content"],
            type=row["type"],
            link=row["link"],
            is_read=bool(row["is_read"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

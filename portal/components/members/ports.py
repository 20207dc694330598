from datetime import datetime
from typing import Protocol
from uuid import UUID

from portal.domain.entities import Community, Member


class MemberDirectoryPort(Protocol):
    def get_by_id(self, member_id: UUID) -> Member | None: ...
    def list_by_community(self, community_id: UUID) -> list[Member]: ...
    def list_all(self) -> list[Member]: ...


class MemberAdminPort(MemberDirectoryPort, Protocol):
    def insert(self, member: Member) -> Member: ...
    def save(self, member: Member) -> Member: ...


class CommunityReaderPort(Protocol):
    def get_by_id(self, community_id: UUID) -> Community | None: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...

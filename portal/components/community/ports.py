from datetime import datetime
from typing import Protocol
from uuid import UUID

from portal.domain.entities import Community, Member


class CommunityRepoPort(Protocol):
    def get_by_id(self, community_id: UUID) -> Community | None: ...
    def save(self, community: Community) -> Community: ...
    def delete(self, community_id: UUID) -> bool: ...
    def list_all(self) -> list[Community]: ...


class MemberReaderPort(Protocol):
    def get_by_id(self, member_id: UUID) -> Member | None: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...

from typing import Protocol
from uuid import UUID

from portal.domain.entities import Member


class MemberReaderPort(Protocol):
    def get_by_id(self, member_id: UUID) -> Member | None: ...

from dataclasses import dataclass
from uuid import UUID

from portal.domain.entities import Member
from portal.domain.policy import UNPRIVILEGED, Privilege


@dataclass(frozen=True)
class ClassifyInput:
    identity: UUID


@dataclass
class AuthzOutput:
    privilege: Privilege = UNPRIVILEGED
    member: Member | None = None

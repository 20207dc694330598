import logging

from portal.domain.policy import UNPRIVILEGED, PolicyEngine
from portal.ports.repo import StoreError

from .models import AuthzOutput, ClassifyInput
from .ports import MemberReaderPort

logger = logging.getLogger(__name__)


def run_classify(
    inp: ClassifyInput,
    member_repo: MemberReaderPort,
    policy: PolicyEngine,
) -> AuthzOutput:
    try:
        member = member_repo.get_by_id(inp.identity)
    except StoreError:
        # Fail closed
        logger.warning("Member lookup failed for %s; treating as unprivileged", inp.identity)
        return AuthzOutput(privilege=UNPRIVILEGED)

    return AuthzOutput(privilege=policy.classify(member), member=member)


def run(
    inp: ClassifyInput,
    *,
    member_repo: MemberReaderPort,
    policy: PolicyEngine,
) -> AuthzOutput:
    return run_classify(inp, member_repo, policy)

"""
Authz component - classify an identity as superadmin, admin-of(community) or unprivileged.
"""

from .component import run, run_classify
from .models import AuthzOutput, ClassifyInput
from .ports import MemberReaderPort

__all__ = [
    "run",
    "run_classify",
    "ClassifyInput",
    "AuthzOutput",
    "MemberReaderPort",
]

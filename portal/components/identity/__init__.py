"""
Identity component - resolve the acting identity from request credentials.
"""

from .component import (
    BearerCredentialStrategy,
    SessionArtifactStrategy,
    default_strategies,
    run,
    run_resolve,
)
from .models import Credentials, IdentityOutput, ResolveIdentityInput
from .ports import CredentialStrategy, IdentityServicePort

__all__ = [
    # Entry points
    "run",
    "run_resolve",
    "default_strategies",
    # Strategies
    "BearerCredentialStrategy",
    "SessionArtifactStrategy",
    # Models
    "Credentials",
    "ResolveIdentityInput",
    "IdentityOutput",
    # Ports
    "CredentialStrategy",
    "IdentityServicePort",
]

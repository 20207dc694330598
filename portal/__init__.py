"""Community Portal backend: communities, members and invite-based onboarding."""

__version__ = "0.1.0"

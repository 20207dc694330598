from typing import Literal

# Failure classes shared by every component output. The HTTP layer maps each
# code to a status; components never raise these past their boundary.
ErrorCode = Literal[
    "unauthenticated",
    "unauthorized",
    "not_found",
    "conflict",
    "downstream_failure",
    "invalid_input",
]

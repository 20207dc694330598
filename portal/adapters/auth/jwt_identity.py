from uuid import UUID

from portal.api.auth_utils import ALGORITHM, decode_access_token


class JWTIdentityService:
    """Verifies bearer tokens signed by the identity service (HS256 shared secret)."""

    def __init__(self, secret_key: str, algorithm: str = ALGORITHM) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm

    def verify_access_token(self, token: str) -> UUID | None:
        payload = decode_access_token(token, self.secret_key, self.algorithm)
        if not payload:
            return None

        sub = payload.get("sub")
        if not isinstance(sub, str):
            return None
        try:
            return UUID(sub)
        except ValueError:
            return None

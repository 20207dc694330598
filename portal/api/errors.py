from fastapi import HTTPException, status

from portal.domain.errors import ErrorCode

STATUS_BY_CODE: dict[ErrorCode, int] = {
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "unauthorized": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "invalid_input": status.HTTP_400_BAD_REQUEST,
    "downstream_failure": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_error(
    error_code: ErrorCode | None,
    detail: str | None,
    overrides: dict[ErrorCode, int] | None = None,
    headers: dict[str, str] | None = None,
) -> HTTPException:
    """Build the HTTPException for a failed component output."""
    code: ErrorCode = error_code or "downstream_failure"
    status_code = (overrides or {}).get(code, STATUS_BY_CODE[code])
    headers = dict(headers or {})
    if code == "unauthenticated":
        headers["WWW-Authenticate"] = "Bearer"
    return HTTPException(
        status_code=status_code, detail=detail or "Request failed", headers=headers
    )

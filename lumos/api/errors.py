"""Response envelope, outcome-to-status mapping and page redirects."""

from collections.abc import Sequence
from typing import Any
from urllib.parse import urlencode

from fastapi import status
from fastapi.responses import JSONResponse, RedirectResponse

from lumos.domain.errors import ActionError, ErrorKind

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.UPSTREAM: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def envelope_error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def error_response(error: ActionError | None) -> JSONResponse:
    if error is None:
        return envelope_error("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return envelope_error(error.message, STATUS_BY_KIND[error.kind])


def success_response(
    data: Any = None,
    *,
    message: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    content: dict[str, Any] = {"success": True, "data": data}
    if message:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def validation_message(errors: Sequence[Any]) -> str:
    """First validation error as "field: message"."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{where}: {first.get('msg')}" if where else str(first.get("msg"))


def page_redirect(base_url: str, path: str, params: dict[str, str]) -> RedirectResponse:
    """Redirect to a frontend page on the public site, never a path on the API host."""
    return RedirectResponse(f"{base_url.rstrip('/')}{path}?{urlencode(params)}")

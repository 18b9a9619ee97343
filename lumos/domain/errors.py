"""
Outcome error taxonomy shared by all components.

Components return these inside their Output models; only the HTTP layer
turns a kind into a status code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    UPSTREAM = "upstream"


@dataclass(frozen=True)
class ActionError:
    """Error detail carried by a failed component outcome."""

    kind: ErrorKind
    code: str
    message: str
    field: str | None = None


def not_found(what: str, field: str | None = None) -> ActionError:
    return ActionError(ErrorKind.NOT_FOUND, f"{what.upper()}_NOT_FOUND", f"{what.capitalize()} not found", field)


def unauthenticated() -> ActionError:
    return ActionError(ErrorKind.UNAUTHENTICATED, "UNAUTHENTICATED", "Unauthorized")


def forbidden() -> ActionError:
    return ActionError(ErrorKind.FORBIDDEN, "FORBIDDEN", "Forbidden")


def invalid_input(code: str, message: str, field: str | None = None) -> ActionError:
    return ActionError(ErrorKind.INVALID_INPUT, code, message, field)


def upstream(message: str) -> ActionError:
    return ActionError(ErrorKind.UPSTREAM, "UPSTREAM", message)

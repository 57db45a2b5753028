from dataclasses import dataclass
from typing import Optional

import openai
from fastapi import HTTPException, Request
from fastapi.responses import PlainTextResponse


@dataclass(frozen=True)
class ErrorReport:
    public_message: str
    log_detail: str


class AdminError(HTTPException):
    """HTTP error for admin routes; rendered as plain text, not JSON."""


class MissingCredentials(Exception):
    """No OPENAI_API_KEY is configured, so no provider client exists."""

    def __init__(self, message: str = "OPENAI_API_KEY is not set"):
        super().__init__(message)


def describe_provider_error(exc: BaseException, public_message: str) -> ErrorReport:
    """
    Turn a provider (or any) exception into a caller-safe message and a
    detailed string for the server log.
    """
    if isinstance(exc, openai.APIStatusError):
        detail = (
            f"{exc.__class__.__name__} status={exc.status_code} "
            f"request_id={exc.request_id} message={exc.message} body={exc.body}"
        )
    elif isinstance(exc, openai.APIError):
        detail = f"{exc.__class__.__name__} message={exc.message} body={exc.body}"
    else:
        detail = f"{exc.__class__.__name__}: {exc!r}"
    return ErrorReport(public_message=public_message, log_detail=detail)


def best_effort_message(exc: BaseException) -> str:
    message: Optional[str] = getattr(exc, "message", None)
    return message or str(exc) or exc.__class__.__name__


def admin_failure(prefix: str, exc: BaseException) -> ErrorReport:
    """Admin callers may see provider detail; the operator is the only audience."""
    return describe_provider_error(exc, f"{prefix}: {best_effort_message(exc)}")


async def admin_error_handler(request: Request, exc: AdminError) -> PlainTextResponse:
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

import secrets
from typing import Awaitable, Callable, Optional, Tuple

from fastapi import Request


TokenExtractor = Callable[[Request], Awaitable[Optional[str]]]

ADMIN_TOKEN_QUERY_PARAM = "token"
ADMIN_TOKEN_HEADER = "x-admin-token"
ADMIN_TOKEN_BODY_FIELD = "token"


async def token_from_query(request: Request) -> Optional[str]:
    return request.query_params.get(ADMIN_TOKEN_QUERY_PARAM) or None


async def token_from_header(request: Request) -> Optional[str]:
    return request.headers.get(ADMIN_TOKEN_HEADER) or None


async def token_from_json_body(request: Request) -> Optional[str]:
    # Multipart bodies are consumed by form parsing; only JSON is inspected.
    if not request.headers.get("content-type", "").startswith("application/json"):
        return None
    try:
        body = await request.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    token = body.get(ADMIN_TOKEN_BODY_FIELD)
    return token if isinstance(token, str) and token else None


# Evaluated in order; the first strategy that yields a token wins.
TOKEN_EXTRACTORS: Tuple[TokenExtractor, ...] = (
    token_from_query,
    token_from_header,
    token_from_json_body,
)


async def extract_admin_token(request: Request) -> Optional[str]:
    for extractor in TOKEN_EXTRACTORS:
        token = await extractor(request)
        if token:
            return token
    return None


def verify_admin_token(supplied: Optional[str], expected: str) -> bool:
    if not supplied:
        return False
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))

from __future__ import annotations

"""Slim API routes: health and outline.

Keeps routes minimal and defers parsing/reduction to the outline provider.
"""

import json
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from php_outline.app.core.config import get_settings
from php_outline.app.core.logging import get_logger
from php_outline.app.core.models import ErrorResponse, HealthResponse, OutlineResponse
from php_outline.outline.provider import OutlineError, OutlineProvider
from php_outline.outline.reducer import FilterMode

logger = get_logger(__name__)

router = APIRouter()

MISSING_PATH = "Missing 'path' query parameter"
GET_ONLY = "Only GET requests are supported"

_TRUTHY = {"1", "true", "on", "yes"}


class PrettyJSONResponse(JSONResponse):
    """JSON rendered with the configured indentation."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content, ensure_ascii=False, indent=get_settings().JSON_INDENT
        ).encode("utf-8")


def parse_bool(value: str | None) -> bool:
    """Interpret a query flag the way PHP's FILTER_VALIDATE_BOOL does."""
    return (value or "").strip().lower() in _TRUTHY


def filter_from_query(public: str | None) -> FilterMode:
    return FilterMode.PUBLIC_ONLY if parse_bool(public) else FilterMode.ALL


def _error(request: Request, message: str, status_code: int) -> PrettyJSONResponse:
    # Picked up by the request logging middleware
    request.state.error = message
    return PrettyJSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code)


@router.get("/health", response_model=HealthResponse)
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get(
    "/",
    response_model=OutlineResponse,
    responses={400: {"model": ErrorResponse}},
)
def outline(request: Request, path: str | None = None, public: str | None = None) -> PrettyJSONResponse:
    """Outline the PHP file or directory at ``path``.

    ``public=1`` keeps only public, non-abstract members.
    """
    if not path:
        return _error(request, MISSING_PATH, 400)

    provider = OutlineProvider(get_settings())
    try:
        result = provider.outline(path, filter_from_query(public))
    except (OutlineError, OSError) as e:
        return _error(request, str(e), 400)

    return PrettyJSONResponse(OutlineResponse.model_validate(result).model_dump())


@router.api_route(
    "/",
    methods=["POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def method_not_allowed(request: Request) -> PrettyJSONResponse:
    response = _error(request, GET_ONLY, 405)
    response.headers["Allow"] = "GET"
    return response

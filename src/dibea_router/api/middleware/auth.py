"""Optional X-API-Key authentication middleware."""

from __future__ import annotations

import hmac

from fastapi import Request, Response
from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)
from starlette.responses import JSONResponse

from dibea_router.api.schemas import APIResponse
from dibea_router.constants import (
    AUTH_EXEMPT_PATHS,
    AUTH_EXEMPT_PREFIXES,
)

API_KEY_HEADER = "X-API-Key"


def is_exempt(path: str) -> bool:
    return path in AUTH_EXEMPT_PATHS or path.startswith(AUTH_EXEMPT_PREFIXES)


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Require ``X-API-Key`` on every non-exempt path.

    The key comes from ``Settings.api_key`` on the typed app state;
    when it is empty (or the state is not set up yet) every request
    passes through. Health and docs paths are always public.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if is_exempt(request.url.path):
            return await call_next(request)

        typed = getattr(request.app.state, "typed", None)
        expected = typed.settings.api_key if typed is not None else ""
        if not expected:
            return await call_next(request)

        provided = request.headers.get(API_KEY_HEADER, "")
        if not hmac.compare_digest(provided, expected):
            body = APIResponse(
                success=False, error="Invalid or missing API key"
            )
            return JSONResponse(status_code=401, content=body.model_dump())

        return await call_next(request)

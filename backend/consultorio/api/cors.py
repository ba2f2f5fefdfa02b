from typing import Dict, Optional, Sequence
from urllib.parse import urlparse

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

ALLOW_HEADERS = "Content-Type, Authorization"
ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"


def _origin_from_referer(referer: Optional[str]) -> Optional[str]:
    if not referer:
        return None
    parsed = urlparse(referer)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def request_origin(request: Request) -> Optional[str]:
    return request.headers.get("origin") or _origin_from_referer(request.headers.get("referer"))


def cors_headers(origin: Optional[str], allowed_origins: Sequence[str]) -> Dict[str, str]:
    """Refleja el origen si está permitido; si no, responde con el primero de la lista."""
    allow = origin if origin and origin in allowed_origins else allowed_origins[0]
    return {
        "Access-Control-Allow-Origin": allow,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Vary": "Origin",
    }


class CorsMiddleware(BaseHTTPMiddleware):
    """Agrega cabeceras CORS a toda respuesta y contesta los preflight OPTIONS antes del ruteo."""

    def __init__(self, app: ASGIApp, allowed_origins: Sequence[str]) -> None:
        super().__init__(app)
        self.allowed_origins = list(allowed_origins)

    async def dispatch(self, request: Request, call_next) -> Response:
        headers = cors_headers(request_origin(request), self.allowed_origins)
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response

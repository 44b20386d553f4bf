"""
CORS 헤더 미들웨어

허용 목록에 있는 Origin 은 그대로 되돌려주고, 그 외에는 대표 프로덕션
Origin 으로 응답한다. allow_any_origin=True 이면 항상 '*'.
프리플라이트(OPTIONS) 응답 자체는 엔드포인트가 만든다.
"""

import logging
from typing import Callable, Iterable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

ALLOW_METHODS = "POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, X-API-Key"

logger = logging.getLogger(__name__)


def resolve_allowed_origin(
    origin: Optional[str],
    allowed_origins: Iterable[str],
    default_origin: str,
    allow_any_origin: bool = False,
) -> str:
    if allow_any_origin:
        return "*"
    if origin and origin in allowed_origins:
        return origin
    return default_origin


class PortraitCORSMiddleware(BaseHTTPMiddleware):
    """모든 응답(처리되지 않은 예외의 500 포함)에 CORS 헤더를 붙인다."""

    def __init__(
        self,
        app: FastAPI,
        allowed_origins: Iterable[str] = (),
        default_origin: str = "",
        allow_any_origin: bool = False,
    ):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)
        self.default_origin = default_origin
        self.allow_any_origin = allow_any_origin

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as exc:
            # 처리되지 않은 예외도 CORS 헤더가 붙은 JSON 500 으로 응답
            logger.exception(f"Internal server error: {exc}")
            response = JSONResponse(status_code=500, content={"error": "Internal server error"})
        response.headers["Access-Control-Allow-Origin"] = resolve_allowed_origin(
            request.headers.get("origin"),
            self.allowed_origins,
            self.default_origin,
            self.allow_any_origin,
        )
        response.headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
        if not self.allow_any_origin:
            response.headers["Vary"] = "Origin"
        return response

"""
캐릭터 초상화 업로드 서비스 - FastAPI 메인 애플리케이션
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging
import os

from portrait_api.core.config import settings
from portrait_api.core.cors import PortraitCORSMiddleware
from portrait_api.core.exceptions import METHOD_NOT_ALLOWED_MESSAGE, PortraitAPIError, RateLimitExceededError
from portrait_api.core.paths import get_upload_dir, get_portraits_dir
from portrait_api.core.redis_client import close_redis_client
from portrait_api.api.portraits import router as portraits_router

# 로깅 설정
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 시작/종료 시 실행되는 이벤트"""
    logger.info("🚀 초상화 업로드 서비스 시작")
    if not settings.PORTRAIT_UPLOAD_API_KEY:
        logger.warning("PORTRAIT_UPLOAD_API_KEY 미설정: 모든 업로드가 401 로 거절됩니다.")
    logger.info(
        f"레이트 리밋: enabled={settings.RATE_LIMIT_ENABLED} backend={settings.RATE_LIMIT_BACKEND} "
        f"{settings.RATE_LIMIT_MAX_REQUESTS}회/{settings.RATE_LIMIT_WINDOW_SECONDS}초"
    )

    yield

    await close_redis_client()
    logger.info("👋 초상화 업로드 서비스 종료")


# FastAPI 앱 생성
app = FastAPI(
    title="Portrait Upload API",
    description="base64 이미지를 512x512 JPEG 캐릭터 초상화로 저장",
    version="1.0.0",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    lifespan=lifespan
)

# 저장된 초상화 정적 서빙 (.rate-limits 는 노출하지 않음)
UPLOAD_DIR = get_upload_dir(settings.UPLOAD_DIRECTORY)
PORTRAITS_DIR = get_portraits_dir(UPLOAD_DIR)
os.makedirs(PORTRAITS_DIR, exist_ok=True)
app.mount("/uploads/portraits", StaticFiles(directory=PORTRAITS_DIR), name="portraits")

app.add_middleware(
    PortraitCORSMiddleware,
    allowed_origins=settings.CORS_ALLOWED_ORIGINS,
    default_origin=settings.CORS_DEFAULT_ORIGIN,
    allow_any_origin=settings.CORS_ALLOW_ANY_ORIGIN,
)


@app.exception_handler(PortraitAPIError)
async def portrait_api_error_handler(request: Request, exc: PortraitAPIError):
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # 라우트가 모르는 메서드(TRACE, PROPFIND 등)는 라우터가 405 를 던진다
    message = METHOD_NOT_ALLOWED_MESSAGE if exc.status_code == 405 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=getattr(exc, "headers", None))


app.include_router(portraits_router, prefix="/api", tags=["🖼️ 초상화"])


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "message": "Portrait Upload API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """헬스 체크 엔드포인트"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "rate_limit_backend": settings.RATE_LIMIT_BACKEND if settings.RATE_LIMIT_ENABLED else "disabled",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "portrait_api.main:app",
        host="0.0.0.0",
        port=8000,
        proxy_headers=True,
        reload=not settings.is_production
    )

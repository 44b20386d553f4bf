"""
캐릭터 초상화 업로드 API

처리 순서: OPTIONS 프리플라이트 -> 레이트 리밋 -> 메서드 -> API 키
-> 본문 검증 -> 이미지 정규화 -> 저장/정리 -> 응답
"""
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from portrait_api.core.config import Settings
from portrait_api.core.exceptions import METHOD_NOT_ALLOWED_MESSAGE, MethodNotAllowedError, RateLimitExceededError
from portrait_api.core.rate_limit import SlidingWindowRateLimiter
from portrait_api.core.security import API_KEY_HEADER, verify_api_key
from portrait_api.dependencies import get_normalizer, get_portrait_store, get_rate_limiter, get_settings
from portrait_api.schemas.portrait import ErrorResponse, PortraitDimensions, PortraitUploadResponse
from portrait_api.services.image_normalizer import PortraitNormalizer
from portrait_api.services.payload import parse_upload_request
from portrait_api.services.portrait_store import PortraitStore

logger = logging.getLogger(__name__)

router = APIRouter()

# 405 도 레이트 리밋을 거치도록 흔한 메서드는 모두 받는다.
# 목록 밖 메서드는 라우터의 405 가 같은 메시지로 응답하지만 레이트 리밋은 거치지 않는다
ACCEPTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def build_public_url(request: Request, public_path: str) -> str:
    scheme = "https" if request.url.scheme == "https" else "http"
    host = request.headers.get("host") or request.url.netloc
    return f"{scheme}://{host}{public_path}"


def _client_id(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.api_route(
    "/upload-portrait",
    methods=ACCEPTED_METHODS,
    response_model=PortraitUploadResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 401, 405, 429, 500)},
)
async def upload_portrait(
    request: Request,
    config: Settings = Depends(get_settings),
    limiter: Optional[SlidingWindowRateLimiter] = Depends(get_rate_limiter),
    store: PortraitStore = Depends(get_portrait_store),
    normalizer: PortraitNormalizer = Depends(get_normalizer),
):
    """
    base64 data URI 이미지를 512x512 JPEG 초상화로 저장하고 공개 URL 을 반환합니다.
    """
    if request.method == "OPTIONS":
        return Response(status_code=200, media_type="application/json")

    if limiter is not None:
        client_id = _client_id(request)
        if not await limiter.admit(client_id):
            logger.warning(f"레이트 리밋 초과: {client_id}")
            raise RateLimitExceededError(retry_after=limiter.window_seconds)

    if request.method != "POST":
        raise MethodNotAllowedError(METHOD_NOT_ALLOWED_MESSAGE)

    verify_api_key(request.headers.get(API_KEY_HEADER), config.PORTRAIT_UPLOAD_API_KEY)

    upload = parse_upload_request(await request.body())

    # Pillow 디코딩/리샘플은 CPU 작업이라 스레드에서 실행
    portrait = await asyncio.to_thread(normalizer.normalize, upload.image_bytes)
    stored = await asyncio.to_thread(store.save, upload.character_id, portrait.image_bytes)

    logger.info(
        f"초상화 저장 완료: characterId={upload.character_id!r} "
        f"file={stored.filename} size={stored.size}"
    )

    return PortraitUploadResponse(
        success=True,
        url=build_public_url(request, stored.public_path),
        characterId=upload.character_id,
        size=stored.size,
        dimensions=PortraitDimensions(width=portrait.width, height=portrait.height),
    )

"""
보안 관련 유틸리티
"""

import logging
import secrets
from typing import Optional

from portrait_api.core.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


def verify_api_key(provided: Optional[str], expected: Optional[str]) -> None:
    """X-API-Key 검증. 설정값이 비어 있으면 모든 요청을 거절한다."""
    if not expected:
        logger.warning("PORTRAIT_UPLOAD_API_KEY 가 설정되지 않아 업로드를 거절합니다.")
        raise UnauthorizedError("Invalid API key")
    if not provided or not secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        raise UnauthorizedError("Invalid API key")

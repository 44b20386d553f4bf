"""
업로드 엔드포인트 에러 정의

모든 에러는 {"error": message} JSON 으로 내려가며 서버에서 재시도하지 않는다.
"""

from typing import Optional


METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"


class PortraitAPIError(Exception):
    """업로드 API 에러 베이스"""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_payload(self) -> dict:
        return {"error": self.message}


class MethodNotAllowedError(PortraitAPIError):
    status_code = 405


class UnauthorizedError(PortraitAPIError):
    status_code = 401


class BadRequestError(PortraitAPIError):
    status_code = 400


class InternalError(PortraitAPIError):
    status_code = 500


class RateLimitExceededError(PortraitAPIError):
    """윈도우 내 요청 한도 초과. retry_after 는 윈도우 길이(초)"""
    status_code = 429

    def __init__(self, retry_after: int, message: str = "Too many requests. Please try again later."):
        self.retry_after = retry_after
        super().__init__(message)

    def to_payload(self) -> dict:
        return {"error": self.message, "retry_after": self.retry_after}

"""
Pydantic 스키마 패키지
"""

from .portrait import (
    PortraitUploadRequest,
    PortraitUploadResponse,
    PortraitDimensions,
    ErrorResponse,
)

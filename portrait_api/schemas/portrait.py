from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class PortraitUploadRequest(BaseModel):
    """업로드 요청 본문. characterName 은 표시용이며 저장 경로에 쓰지 않는다."""
    image: str
    characterId: str
    characterName: Optional[str] = "character"

    model_config = ConfigDict(coerce_numbers_to_str=True)


class PortraitDimensions(BaseModel):
    width: int
    height: int


class PortraitUploadResponse(BaseModel):
    success: bool = True
    url: str
    characterId: str
    size: int = Field(..., description="저장된 파일 크기(bytes)")
    dimensions: PortraitDimensions


class ErrorResponse(BaseModel):
    error: str
    retry_after: Optional[int] = None

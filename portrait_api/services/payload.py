"""
업로드 요청 본문 검증

- JSON 파싱 및 필수 필드(image, characterId) 확인
- characterId 정리 ([A-Za-z0-9_-] 외 문자 제거, 빈 문자열 허용)
- data URI 형식 확인 후 base64 디코딩
"""
from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from portrait_api.core.exceptions import BadRequestError
from portrait_api.schemas.portrait import PortraitUploadRequest

DATA_URI_RE = re.compile(r"^data:image/(jpeg|jpg|png|gif|webp);base64,")
_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9_-]")
_WHITESPACE = re.compile(r"\s+")

MISSING_FIELDS_MESSAGE = "Missing required fields: image, characterId"


@dataclass
class DecodedUpload:
    character_id: str
    character_name: Optional[str]
    image_type: str
    image_bytes: bytes


def sanitize_character_id(raw: str) -> str:
    return _UNSAFE_ID_CHARS.sub("", raw)


def parse_data_uri(data_uri: str) -> tuple[str, str]:
    """(선언된 MIME 서브타입, base64 페이로드) 반환"""
    m = DATA_URI_RE.match(data_uri)
    if not m:
        raise BadRequestError("Invalid image format. Must be base64 data URI")
    return m.group(1), data_uri[m.end():]


def decode_base64_payload(payload: str) -> bytes:
    # data URI 안의 줄바꿈/공백은 무시
    compact = _WHITESPACE.sub("", payload)
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        raise BadRequestError("Failed to decode base64 image")


def parse_upload_request(body: bytes) -> DecodedUpload:
    try:
        data = json.loads(body) if body else None
    except (ValueError, UnicodeDecodeError):
        data = None
    if not isinstance(data, dict):
        raise BadRequestError(MISSING_FIELDS_MESSAGE)

    try:
        req = PortraitUploadRequest.model_validate(data)
    except ValidationError:
        raise BadRequestError(MISSING_FIELDS_MESSAGE)

    character_id = sanitize_character_id(req.characterId)
    image_type, payload = parse_data_uri(req.image)
    image_bytes = decode_base64_payload(payload)

    return DecodedUpload(
        character_id=character_id,
        character_name=req.characterName,
        image_type=image_type,
        image_bytes=image_bytes,
    )

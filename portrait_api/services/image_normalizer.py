"""
초상화 이미지 정규화
임의 비율의 JPEG/PNG/GIF/WEBP 를 가운데 정사각형으로 잘라 512x512 JPEG 로 변환
"""
import io
import logging
from dataclasses import dataclass

from PIL import Image

from portrait_api.core.exceptions import BadRequestError

logger = logging.getLogger(__name__)


@dataclass
class NormalizedPortrait:
    """정규화된 초상화 결과"""
    image_bytes: bytes
    width: int = 512
    height: int = 512


class PortraitNormalizer:
    """가운데 정사각형 크롭 + 리샘플 + JPEG 인코딩"""

    TARGET_SIZE = 512
    JPEG_QUALITY = 85
    # data URI 로 허용하는 형식만 디코딩
    ACCEPTED_FORMATS = ("JPEG", "PNG", "GIF", "WEBP")

    def __init__(self, target_size: int = TARGET_SIZE, quality: int = JPEG_QUALITY):
        self.target_size = target_size
        self.quality = quality

    def _open(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(data), formats=self.ACCEPTED_FORMATS)
            # 지연 디코딩이라 load() 까지 해야 손상 여부를 알 수 있음
            img.load()
        except Exception as e:
            # UnidentifiedImageError, 잘린 파일(OSError), 디컴프레션 밤 등 디코더 에러 전부
            logger.info(f"이미지 디코딩 실패: {e}")
            raise BadRequestError("Invalid image data")
        return img

    @staticmethod
    def _has_alpha(img: Image.Image) -> bool:
        return img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)

    @staticmethod
    def center_square_box(width: int, height: int) -> tuple[float, float, float, float]:
        """(left, top, right, bottom). 오프셋은 소수일 수 있다."""
        side = min(width, height)
        x = (width - side) / 2
        y = (height - side) / 2
        return (x, y, x + side, y + side)

    def normalize(self, data: bytes) -> NormalizedPortrait:
        src = self._open(data)
        width, height = src.size

        # 알파는 리샘플까지 유지하고 JPEG 인코딩 직전에 버린다
        src = src.convert("RGBA" if self._has_alpha(src) else "RGB")

        box = self.center_square_box(width, height)
        canvas = src.resize(
            (self.target_size, self.target_size),
            resample=Image.Resampling.LANCZOS,
            box=box,
        )
        if canvas.mode != "RGB":
            canvas = canvas.convert("RGB")

        with io.BytesIO() as buffer:
            canvas.save(buffer, format="JPEG", quality=self.quality)
            out = buffer.getvalue()

        logger.debug(f"초상화 정규화: {width}x{height} -> {self.target_size}x{self.target_size} ({len(out)} bytes)")
        return NormalizedPortrait(image_bytes=out, width=self.target_size, height=self.target_size)

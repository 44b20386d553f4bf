"""
캐릭터별 초상화 파일 저장소

uploads/portraits/{characterId}/portrait-{timestamp}.jpg 에 저장하고,
같은 디렉토리의 이전 portrait-*.jpg 는 삭제해 항상 최신 1개만 남긴다.
"""
import glob
import logging
import os
import time
from dataclasses import dataclass
from typing import Callable

from portrait_api.core.exceptions import InternalError

logger = logging.getLogger(__name__)


@dataclass
class StoredPortrait:
    public_path: str
    filename: str
    path: str
    size: int


class PortraitStore:
    """
    로컬 파일시스템 초상화 저장소.
    같은 초에 두 번 업로드되면 파일명이 같아 나중 것이 덮어쓴다.
    정리 단계에는 잠금이 없어 같은 캐릭터의 동시 업로드는 파일이 잠시 2개가 될 수 있다.
    """

    FILENAME_PREFIX = "portrait-"
    FILENAME_SUFFIX = ".jpg"

    def __init__(self, base_dir: str, public_base: str = "/uploads/portraits", clock: Callable[[], float] = time.time) -> None:
        self.base_dir = base_dir
        self.public_base = public_base.rstrip("/")
        self.clock = clock

    def character_dir(self, character_id: str) -> str:
        return os.path.join(self.base_dir, character_id)

    def save(self, character_id: str, data: bytes) -> StoredPortrait:
        directory = self.character_dir(character_id)
        try:
            os.makedirs(directory, mode=0o755, exist_ok=True)
        except OSError as e:
            logger.error(f"초상화 디렉토리 생성 실패({directory}): {e}")
            raise InternalError("Failed to save image")

        filename = f"{self.FILENAME_PREFIX}{int(self.clock())}{self.FILENAME_SUFFIX}"
        path = os.path.join(directory, filename)
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"초상화 저장 실패({path}): {e}")
            raise InternalError("Failed to save image")

        self._cleanup_old(directory, keep=path)

        return StoredPortrait(
            public_path=f"{self.public_base}/{character_id}/{filename}",
            filename=filename,
            path=path,
            size=os.path.getsize(path),
        )

    def _cleanup_old(self, directory: str, keep: str) -> None:
        pattern = os.path.join(glob.escape(directory), f"{self.FILENAME_PREFIX}*{self.FILENAME_SUFFIX}")
        for old in glob.glob(pattern):
            if os.path.abspath(old) == os.path.abspath(keep):
                continue
            try:
                os.remove(old)
            except OSError as e:
                # 새 파일이 이미 기준이므로 정리 실패는 무시
                logger.debug(f"이전 초상화 삭제 실패({old}): {e}")

import base64
import io
import os
import shutil
import tempfile
from pathlib import Path

# 앱 임포트 전에 설정해야 모듈 레벨 settings/정적 마운트가 임시 디렉토리를 쓴다
os.environ["UPLOAD_DIRECTORY"] = tempfile.mkdtemp(prefix="portrait-uploads-")
os.environ["PORTRAIT_UPLOAD_API_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from portrait_api.core.config import Settings
from portrait_api.core.paths import get_portraits_dir, get_rate_limit_dir
from portrait_api.core.rate_limit import FileRateLimitStore, SlidingWindowRateLimiter
from portrait_api.dependencies import get_portrait_store, get_rate_limiter, get_settings
from portrait_api.main import app
from portrait_api.services.portrait_store import PortraitStore

API_KEY = "test-secret"


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_image_bytes(fmt: str = "PNG", size=(64, 64), mode: str = "RGB", color=(200, 30, 30)) -> bytes:
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def to_data_uri(data: bytes, subtype: str = "png") -> str:
    return f"data:image/{subtype};base64,{base64.b64encode(data).decode('ascii')}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upload_dir():
    # 정적 마운트와 같은 디렉토리를 쓰고 테스트마다 비운다
    root = Path(os.environ["UPLOAD_DIRECTORY"])
    shutil.rmtree(root, ignore_errors=True)
    root.mkdir(parents=True)
    return root


@pytest.fixture
def test_settings(upload_dir):
    return Settings(
        PORTRAIT_UPLOAD_API_KEY=API_KEY,
        UPLOAD_DIRECTORY=str(upload_dir),
        RATE_LIMIT_ENABLED=True,
        RATE_LIMIT_BACKEND="file",
        RATE_LIMIT_MAX_REQUESTS=10,
        RATE_LIMIT_WINDOW_SECONDS=300,
    )


@pytest.fixture
def client(test_settings, clock, upload_dir):
    upload_dir.mkdir(parents=True, exist_ok=True)

    def _store():
        return PortraitStore(base_dir=get_portraits_dir(str(upload_dir)), clock=clock)

    def _limiter():
        if not test_settings.RATE_LIMIT_ENABLED:
            return None
        return SlidingWindowRateLimiter(
            FileRateLimitStore(get_rate_limit_dir(str(upload_dir))),
            max_requests=test_settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=test_settings.RATE_LIMIT_WINDOW_SECONDS,
            clock=clock,
        )

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_portrait_store] = _store
    app.dependency_overrides[get_rate_limiter] = _limiter
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def valid_body():
    return {
        "image": to_data_uri(make_image_bytes("PNG", (80, 40))),
        "characterId": "char_01",
        "characterName": "Rook",
    }

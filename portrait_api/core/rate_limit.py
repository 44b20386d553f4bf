"""
간단한 슬라이딩 윈도우 레이트 리밋 유틸리티

클라이언트별(IP md5 해시) 최근 허용 시각 목록을 저장소에 보관한다.
- FileRateLimitStore: uploads/.rate-limits/{hash}.json (기본)
- RedisRateLimitStore: rl:portrait:{hash}

읽기-수정-쓰기 사이에 잠금이 없으므로 같은 클라이언트의 동시 요청은
한도를 1회 정도 넘길 수 있다. 허용하는 경쟁 조건이다.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


def client_key(client_id: str) -> str:
    """저장소 키로 쓰기 위해 클라이언트 식별자를 해시한다."""
    return hashlib.md5(client_id.encode("utf-8")).hexdigest()


def _coerce_timestamps(raw) -> List[int]:
    """손상된 레코드는 빈 목록으로 취급"""
    if not isinstance(raw, list):
        return []
    out: List[int] = []
    for v in raw:
        if isinstance(v, bool):
            continue
        if isinstance(v, (int, float)):
            out.append(int(v))
    return out


class RateLimitStore:
    async def get(self, key: str) -> List[int]:
        raise NotImplementedError

    async def put(self, key: str, timestamps: List[int]) -> None:
        raise NotImplementedError


class FileRateLimitStore(RateLimitStore):
    def __init__(self, base_dir: str) -> None:
        self.base_dir = base_dir

    def _path(self, key: str) -> str:
        return os.path.join(self.base_dir, f"{key}.json")

    async def get(self, key: str) -> List[int]:
        path = self._path(key)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                return _coerce_timestamps(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning(f"레이트 리밋 레코드 읽기 실패({key}): {e}")
            return []

    async def put(self, key: str, timestamps: List[int]) -> None:
        os.makedirs(self.base_dir, exist_ok=True)
        with open(self._path(key), "w", encoding="utf-8") as f:
            json.dump(timestamps, f)


class RedisRateLimitStore(RateLimitStore):
    def __init__(self, redis_client, *, prefix: str = "rl:portrait", ttl_seconds: Optional[int] = None) -> None:
        self.redis = redis_client
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> List[int]:
        data = await self.redis.get(self._key(key))
        if not data:
            return []
        try:
            return _coerce_timestamps(json.loads(data))
        except ValueError:
            return []

    async def put(self, key: str, timestamps: List[int]) -> None:
        # 윈도우가 지나면 레코드 자체가 의미 없으므로 만료 설정
        await self.redis.set(self._key(key), json.dumps(timestamps), ex=self.ttl_seconds)


class SlidingWindowRateLimiter:
    """
    슬라이딩 윈도우 방식 레이트리밋.
    admit(): 허용 여부 반환. 거절된 시도는 기록하지 않는다.
    """

    def __init__(
        self,
        store: RateLimitStore,
        *,
        max_requests: int = 10,
        window_seconds: int = 300,
        clock: Callable[[], float] = time.time,
        fail_open: bool = True,
    ) -> None:
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.fail_open = fail_open

    async def admit(self, client_id: str) -> bool:
        key = client_key(client_id)
        now = int(self.clock())
        try:
            history = await self.store.get(key)
            recent = [ts for ts in history if now - ts < self.window_seconds]
            if len(recent) >= self.max_requests:
                return False
            recent.append(now)
            await self.store.put(key, recent)
            return True
        except Exception as e:
            if not self.fail_open:
                raise
            # 저장소 장애 시 리밋을 우회(가용성 우선)
            logger.warning(f"레이트 리밋 저장소 오류, 제한 미적용: {e}")
            return True

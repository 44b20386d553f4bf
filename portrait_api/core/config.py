"""
애플리케이션 설정
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from pathlib import Path
from dotenv import load_dotenv


"""env 로딩 우선순위
1) OS 환경변수
2) 프로젝트 루트의 .env (repo/.env)
"""

# .env 사전 로드 (OS 환경변수 우선, override=False)
_here = Path(__file__).resolve()
_repo_root_env = _here.parents[2] / ".env"  # repo/.env
if _repo_root_env.exists():
    load_dotenv(dotenv_path=str(_repo_root_env), override=False)


class Settings(BaseSettings):
    """애플리케이션 설정"""
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # X-API-Key 헤더와 비교하는 공유 비밀값
    PORTRAIT_UPLOAD_API_KEY: Optional[str] = None

    # 업로드 루트 (없으면 프로젝트 루트의 uploads)
    UPLOAD_DIRECTORY: Optional[str] = None

    # 초상화 출력 규격
    PORTRAIT_SIZE: int = 512
    PORTRAIT_JPEG_QUALITY: int = 85

    # CORS
    CORS_ALLOWED_ORIGINS: List[str] = [
        "https://www.owlbear.rodeo",
        "https://owlbear.rodeo",
        "https://streetwise.app",
        "https://www.streetwise.app",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    CORS_DEFAULT_ORIGIN: str = "https://streetwise.app"
    CORS_ALLOW_ANY_ORIGIN: bool = False

    # 레이트 리밋
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_MAX_REQUESTS: int = 10
    RATE_LIMIT_WINDOW_SECONDS: int = 300
    RATE_LIMIT_BACKEND: str = "file"  # file | redis
    REDIS_URL: str = "redis://localhost:6379/0"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()


# 환경별 설정 검증
def validate_settings(config: Settings = settings):
    """설정 검증"""
    if config.is_production:
        if not config.PORTRAIT_UPLOAD_API_KEY:
            raise ValueError("프로덕션 환경에서는 PORTRAIT_UPLOAD_API_KEY 를 설정해야 합니다.")

    if config.RATE_LIMIT_BACKEND not in ("file", "redis"):
        raise ValueError(f"알 수 없는 RATE_LIMIT_BACKEND: {config.RATE_LIMIT_BACKEND}")
    if not 1 <= config.PORTRAIT_JPEG_QUALITY <= 100:
        raise ValueError("PORTRAIT_JPEG_QUALITY 는 1~100 범위여야 합니다.")

    return True


# 설정 검증 실행
validate_settings()

import os
from typing import Optional


PORTRAITS_SUBDIR = "portraits"
RATE_LIMIT_SUBDIR = ".rate-limits"


def get_project_root() -> str:
    """프로젝트 루트 절대경로를 반환한다.
    이 파일은 portrait_api/core/paths.py 에 위치하므로,
    상위 상위 디렉토리가 프로젝트 루트가 된다.
    """
    package_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.dirname(package_dir)


def get_upload_dir(configured: Optional[str] = None) -> str:
    """업로드 루트 절대경로를 반환한다.
    - 설정값(UPLOAD_DIRECTORY)이 있으면 이를 우선 사용한다.
    - 없으면 프로젝트 루트의 uploads 를 사용한다.
    디렉토리는 존재를 보장한다.
    """
    uploads = os.path.abspath(configured) if configured else os.path.join(get_project_root(), "uploads")
    os.makedirs(uploads, exist_ok=True)
    return uploads


def get_portraits_dir(upload_dir: str) -> str:
    return os.path.join(upload_dir, PORTRAITS_SUBDIR)


def get_rate_limit_dir(upload_dir: str) -> str:
    return os.path.join(upload_dir, RATE_LIMIT_SUBDIR)

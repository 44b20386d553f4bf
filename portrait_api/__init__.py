"""
캐릭터 초상화 업로드 서비스
"""

__version__ = "1.0.0"

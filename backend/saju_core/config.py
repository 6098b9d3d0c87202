"""
Saju Core Settings
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
프로세스 단위 설정 (환경변수 / .env):
- 기본 유파 프리셋
- 절기 정밀표 연도 범위 + 캐시 크기
- 로그 레벨
요청 단위 계산 옵션은 models/calculation_config.py 참고
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # 계산 기본값
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    default_preset: str = "DEFAULT"  # DEFAULT / KOREAN_MAINSTREAM / TRADITIONAL_CHINESE / MODERN_INTEGRATED

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # 절기 정밀표 (이 범위 밖은 VSOP87D 근사 계산)
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    solar_term_table_start: int = 1900
    solar_term_table_end: int = 2050
    solar_term_cache_size: int = 512

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "SAJU_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


_settings: Optional[Settings] = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure_logging(level: Optional[str] = None) -> None:
    """호스트 애플리케이션용 로깅 초기화 (라이브러리 자체는 핸들러를 달지 않음)"""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

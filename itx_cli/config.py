"""환경변수 설정 - Pydantic Settings"""
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """CLI 프로세스 설정"""

    model_config = SettingsConfigDict(
        env_prefix="ITX_",
        env_file=(".env.local",),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 저장 설정 파일 위치 (config.json)
    config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".config" / "itx-cli",
    )

    # SSO 클러스터 (itx login 기본값)
    default_sso_endpoint: str = "https://app.itxuc.com"

    # HTTP
    request_timeout: float = 30.0

    # Logging
    log_level: str = "warning"

    # Encryption (비어 있으면 평문 저장)
    encryption_key: str = ""


@lru_cache
def get_settings() -> Settings:
    """캐시된 설정 인스턴스 반환"""
    return Settings()

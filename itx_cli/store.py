"""설정 파일 저장소

평면 key-value JSON 파일 (config_dir/config.json)
- 인증 정보 (ssoEndpoint, tokenv2, rcntrl, ccntrl)
- 해석된 활성 엔드포인트 (activeEndpoint)
- 사용자 별칭 (aliases: 이름 → 이메일)
"""
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from itx_cli.config import get_settings
from itx_cli.core.errors import ConfigurationError
from itx_cli.utils.crypto import decrypt_config, encrypt_config, is_encrypted
from itx_cli.utils.logger import get_logger

logger = get_logger(__name__)


CONFIG_FILENAME = "config.json"

# 필드명 → 파일 키
FIELD_KEYS = {
    "sso_endpoint": "ssoEndpoint",
    "tokenv2": "tokenv2",
    "rcntrl": "rcntrl",
    "ccntrl": "ccntrl",
    "active_endpoint": "activeEndpoint",
}


@dataclass
class ItxConfig:
    """저장된 CLI 설정"""
    sso_endpoint: str = ""
    tokenv2: str = ""
    rcntrl: str = ""
    ccntrl: str = ""
    active_endpoint: str = ""
    aliases: dict[str, str] = field(default_factory=dict)


class ConfigStore:
    """설정 파일 읽기/쓰기"""

    def __init__(self, path: Optional[Path] = None, encryption_key: Optional[str] = None):
        settings = get_settings()
        self.path = Path(path) if path else Path(settings.config_dir) / CONFIG_FILENAME
        self.encryption_key = (
            settings.encryption_key if encryption_key is None else encryption_key
        )

    def _read_raw(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Config file is not valid JSON: {self.path}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain an object: {self.path}")
        return data

    def _write_raw(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        # 토큰이 들어 있으므로 소유자만 읽기
        os.chmod(self.path, 0o600)

    def _read(self) -> dict[str, Any]:
        return decrypt_config(self._read_raw(), self.encryption_key)

    def _write(self, data: dict[str, Any]) -> None:
        self._write_raw(encrypt_config(data, self.encryption_key))

    # ===== 설정 =====

    def load(self) -> ItxConfig:
        """저장된 설정 조회 (없는 값은 빈 문자열)"""
        data = self._read()
        aliases = data.get("aliases")
        return ItxConfig(
            **{name: str(data.get(key) or "") for name, key in FIELD_KEYS.items()},
            aliases=dict(aliases) if isinstance(aliases, dict) else {},
        )

    def update(self, **values: Optional[str]) -> None:
        """
        부분 업데이트

        None 값은 무시, 나머지 키는 유지

        Args:
            values: sso_endpoint / tokenv2 / rcntrl / ccntrl / active_endpoint
        """
        unknown = set(values) - set(FIELD_KEYS)
        if unknown:
            raise ValueError(f"Unknown config field(s): {', '.join(sorted(unknown))}")

        data = self._read()
        for name, value in values.items():
            if value is not None:
                data[FIELD_KEYS[name]] = value
        self._write(data)
        logger.debug("Config updated", fields=sorted(k for k, v in values.items() if v is not None))

    def clear(self) -> None:
        """설정 파일 삭제"""
        self.path.unlink(missing_ok=True)
        logger.debug("Config cleared", path=str(self.path))

    def is_encrypted(self) -> bool:
        return is_encrypted(self._read_raw())

    # ===== 별칭 =====

    def get_aliases(self) -> dict[str, str]:
        return self.load().aliases

    def set_alias(self, name: str, value: str) -> None:
        data = self._read()
        aliases = data.get("aliases") if isinstance(data.get("aliases"), dict) else {}
        aliases[name] = value
        data["aliases"] = aliases
        self._write(data)

    def remove_alias(self, name: str) -> bool:
        """별칭 삭제 (존재하지 않으면 False)"""
        data = self._read()
        aliases = data.get("aliases")
        if not isinstance(aliases, dict) or name not in aliases:
            return False
        del aliases[name]
        self._write(data)
        return True

    def resolve_alias(self, name_or_email: str) -> str:
        """별칭이면 대상 값, 아니면 입력 그대로"""
        return self.get_aliases().get(name_or_email, name_or_email)


# ===== 모듈 수준 헬퍼 =====

def get_store() -> ConfigStore:
    return ConfigStore()


def get_config() -> ItxConfig:
    return get_store().load()


def set_config(**values: Optional[str]) -> None:
    get_store().update(**values)


def clear_config() -> None:
    get_store().clear()


def is_configured() -> bool:
    """SSO 엔드포인트와 tokenv2가 모두 저장되어 있는지"""
    config = get_config()
    return bool(config.sso_endpoint and config.tokenv2)


def get_config_path() -> Path:
    return get_store().path


def get_aliases() -> dict[str, str]:
    return get_store().get_aliases()


def set_alias(name: str, value: str) -> None:
    get_store().set_alias(name, value)


def remove_alias(name: str) -> bool:
    return get_store().remove_alias(name)


def resolve_alias(name_or_email: str) -> str:
    return get_store().resolve_alias(name_or_email)

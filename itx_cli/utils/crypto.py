"""암호화 유틸리티

저장 설정 파일의 인증 토큰(tokenv2/rcntrl/ccntrl) 암호화/복호화
Fernet 대칭키 암호화 사용 (AES-128-CBC)
"""
import base64
from typing import Any, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from itx_cli.core.errors import ConfigurationError
from itx_cli.utils.logger import get_logger

logger = get_logger(__name__)


# 암호화 대상 필드
SENSITIVE_FIELDS = frozenset({"tokenv2", "rcntrl", "ccntrl"})


def _get_fernet(key: str) -> Fernet:
    """Fernet 인스턴스 반환

    ITX_ENCRYPTION_KEY 값에서 키 유도
    """
    if not key:
        raise ConfigurationError(
            "Stored credentials are encrypted; set ITX_ENCRYPTION_KEY to read them"
        )

    # PBKDF2로 키 유도 (32바이트 키 → Fernet용 URL-safe base64)
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=b"itx-cli-config-salt",  # 고정 salt (키 유도 일관성)
        iterations=100000,
    )
    derived_key = base64.urlsafe_b64encode(kdf.derive(key.encode()))

    return Fernet(derived_key)


def encrypt_config(config: dict[str, Any], key: str) -> dict[str, Any]:
    """
    설정 dict 암호화

    민감한 필드만 암호화, 나머지는 평문 유지.
    key가 비어 있으면 원본 그대로 반환

    Args:
        config: 원본 설정 dict
        key: 암호화 키

    Returns:
        암호화된 설정 dict
    """
    if not config:
        return {}
    if not key:
        return dict(config)

    fernet = _get_fernet(key)
    encrypted = {}

    for name, value in config.items():
        if name in SENSITIVE_FIELDS and isinstance(value, str) and value:
            encrypted_value = fernet.encrypt(value.encode()).decode()
            encrypted[name] = {"encrypted": True, "value": encrypted_value}
        else:
            encrypted[name] = value

    return encrypted


def decrypt_config(config: dict[str, Any], key: str) -> dict[str, Any]:
    """
    설정 dict 복호화

    Args:
        config: 암호화된 설정 dict
        key: 암호화 키

    Returns:
        복호화된 설정 dict
    """
    if not config:
        return {}

    fernet: Optional[Fernet] = None
    decrypted = {}

    for name, value in config.items():
        if isinstance(value, dict) and value.get("encrypted"):
            if fernet is None:
                fernet = _get_fernet(key)
            try:
                encrypted_value = value.get("value", "")
                decrypted[name] = fernet.decrypt(encrypted_value.encode()).decode()
            except InvalidToken as e:
                logger.debug("Failed to decrypt config field", field=name)
                raise ConfigurationError(f"Failed to decrypt field: {name}") from e
        else:
            decrypted[name] = value

    return decrypted


def is_encrypted(config: dict[str, Any]) -> bool:
    """
    설정에 암호화된 필드가 있는지 확인

    Args:
        config: 저장된 설정 dict

    Returns:
        암호화 여부
    """
    if not config:
        return False

    for value in config.values():
        if isinstance(value, dict) and value.get("encrypted"):
            return True

    return False

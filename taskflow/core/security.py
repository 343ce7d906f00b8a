# taskflow/core/security.py
import bcrypt

from taskflow.core.config import settings

# bcrypt는 72바이트까지만 사용하므로 해시/검증 모두 같은 길이로 자른다.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Salted bcrypt hash; a new random salt is drawn on every call."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        # 저장된 값이 bcrypt 형식이 아님
        return False

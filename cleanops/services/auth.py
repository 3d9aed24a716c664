"""Auth service (JWT, password hashing) and the caller identity handed to the core."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from cleanops.config import Settings
from cleanops.models.user import UserType


@dataclass(frozen=True)
class Actor:
    """Authenticated caller. The core trusts it as-is."""
    user_id: int | None
    user_type: UserType
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.admin

    @property
    def is_worker(self) -> bool:
        return self.user_type == UserType.worker


SYSTEM_ACTOR = Actor(user_id=None, user_type=UserType.system, role="system")


def _pwd_bytes(password: str, max_len: int = 72) -> bytes:
    return password.encode("utf-8")[:max_len]


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_pwd_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(_pwd_bytes(password), bcrypt.gensalt()).decode("utf-8")


def create_access_token(settings: Settings, user_id: int, user_type: UserType, role: str | None = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    # PyJWT expects "sub" to be a string
    payload = {"sub": str(user_id), "user_type": user_type.value, "role": role or user_type.value, "exp": expire}
    raw = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return raw if isinstance(raw, str) else raw.decode("utf-8")


def decode_token_with_error(settings: Settings, token: str) -> tuple[dict | None, str | None]:
    """Decode JWT; returns (payload, error_message)."""
    if not token or not isinstance(token, str):
        return None, "empty token"
    try:
        payload = jwt.decode(token.strip(), settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return payload, None
    except jwt.PyJWTError as e:
        return None, str(e)


def actor_from_payload(payload: dict) -> Actor | None:
    try:
        user_id = int(payload.get("sub"))
        user_type = UserType(payload.get("user_type"))
    except (TypeError, ValueError):
        return None
    if user_type == UserType.system:
        return None
    return Actor(user_id=user_id, user_type=user_type, role=payload.get("role"))

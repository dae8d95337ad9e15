from datetime import datetime, timedelta, timezone
import jwt
from typing import Optional
from .core_settings import get_settings
from .domain.actors import Role

def create_access_token(subject: str, role: Role, expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.TOKEN_EXPIRE_MINUTES
    payload = {"sub": subject, "role": role.value, "iat": now, "exp": now + timedelta(minutes=minutes)}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def decode_access_token(token: str) -> Optional[dict]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except jwt.PyJWTError:
        return None

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Hash de password con formato inválido")
        return False


def new_token() -> str:
    """Token opaco para enlaces de un solo uso (confirmar cuenta, cambiar password, citas)."""
    return secrets.token_urlsafe(24)


class JwtAdapter:
    def __init__(self, seed: str, expires_hours: int = 72) -> None:
        self.seed = seed
        self.expires_hours = expires_hours

    def generate_token(self, payload: Dict[str, Any], expires_hours: Optional[int] = None) -> str:
        hours = expires_hours if expires_hours is not None else self.expires_hours
        claims = dict(payload)
        claims["exp"] = datetime.now(timezone.utc) + timedelta(hours=hours)
        return jwt.encode(claims, self.seed, algorithm=ALGORITHM)

    def validate_token(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            return jwt.decode(token, self.seed, algorithms=[ALGORITHM])
        except JWTError:
            return None

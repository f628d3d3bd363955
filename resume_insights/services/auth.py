# resume_insights/services/auth.py
"""
Bearer token handling. Tokens are issued elsewhere; this module only needs to
read the owner id (`sub`) out of them. create_access_token exists for local
tooling and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from pydantic import BaseModel

from resume_insights.core.config import settings

ALGORITHM = "HS256"


class TokenData(BaseModel):
    sub: Optional[str] = None


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None,
                        secret_key: Optional[str] = None) -> str:
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta if expires_delta else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": subject, "iat": now, "exp": exp}
    return jwt.encode(payload, secret_key or settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: Optional[str] = None) -> TokenData:
    """Raises JWTError on a bad signature, malformed token or expiry."""
    payload = jwt.decode(token, secret_key or settings.SECRET_KEY, algorithms=[ALGORITHM])
    return TokenData(sub=payload.get("sub"))


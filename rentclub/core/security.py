from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional
from jose import JWTError, jwt
import secrets
from rentclub.core.config import settings


@dataclass(frozen=True)
class Identity:
    """Caller identity resolved from the auth provider's token."""
    subject: str
    email: Optional[str] = None
    image_url: Optional[str] = None


class AdminPolicy:
    """Decides whether an identity may use the admin actions."""

    def __init__(self, admin_subjects: Iterable[str]):
        self.admin_subjects = frozenset(admin_subjects)

    @classmethod
    def from_settings(cls) -> "AdminPolicy":
        return cls(settings.ADMIN_USER_ID_SET)

    def is_admin(self, identity: Optional[Identity]) -> bool:
        return identity is not None and identity.subject in self.admin_subjects


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({
        "exp": expire,
        "iat": datetime.utcnow(),
        "jti": secrets.token_urlsafe(16),
        "type": "access"
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, verify_exp: bool = True) -> Optional[dict]:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": verify_exp}
        )
        if payload.get("type") != "access":
            return None
        return payload
    except JWTError:
        return None


def identity_from_token(token: str) -> Optional[Identity]:
    payload = decode_access_token(token)
    if payload is None or not payload.get("sub"):
        return None
    return Identity(
        subject=payload["sub"],
        email=payload.get("email"),
        image_url=payload.get("image_url"),
    )

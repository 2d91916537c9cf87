"""
Caller resolution: bearer identity token -> Identity -> Profile, and the admin gate.
"""
from typing import Any, Optional
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from rentclub.core.database import get_db
from rentclub.core.errors import AuthRedirect, NotFound
from rentclub.core.logging_config import get_logger
from rentclub.core.security import AdminPolicy, Identity, identity_from_token
from rentclub.models.profile import Profile

logger = get_logger("auth")

router = APIRouter()
bearer_scheme = HTTPBearer(auto_error=False)


def get_admin_policy() -> AdminPolicy:
    return AdminPolicy.from_settings()


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    if credentials is None or not credentials.credentials:
        return None
    identity = identity_from_token(credentials.credentials)
    if identity is None:
        logger.warning("get_optional_identity: token decode failed")
    return identity


def get_current_identity(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
    if identity is None:
        raise AuthRedirect("unauthenticated")
    return identity


def get_optional_profile(
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> Any:
    if identity is None:
        return None
    return db.query(Profile).filter(Profile.auth_id == identity.subject).first()


def get_current_profile(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Any:
    """Get the caller's profile"""
    profile = db.query(Profile).filter(Profile.auth_id == identity.subject).first()
    if profile is None:
        raise NotFound("Profile not found")
    return profile


def require_admin(
    identity: Identity = Depends(get_current_identity),
    policy: AdminPolicy = Depends(get_admin_policy),
) -> Identity:
    if not policy.is_admin(identity):
        logger.warning("require_admin: subject=%s is not an admin", identity.subject)
        raise AuthRedirect("forbidden")
    return identity


def get_admin_profile(
    _: Identity = Depends(require_admin),
    profile: Profile = Depends(get_current_profile),
) -> Any:
    return profile


@router.get("/me")
async def whoami(
    identity: Identity = Depends(get_current_identity),
    policy: AdminPolicy = Depends(get_admin_policy),
):
    """Identity as seen by the API, with the admin flag."""
    return {"subject": identity.subject, "email": identity.email, "is_admin": policy.is_admin(identity)}

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session

from .config import AUTH_JWT_ALGORITHM, AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET
from .database import get_db
from .domain.scheduling.errors import Unauthenticated
from .domain.scheduling.repository import AppointmentRepository
from .domain.scheduling.roles import Actor, Role

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def verify_access_token(token: str) -> dict:
    """
    Verify an access token issued by the hosted auth provider.

    Tokens are HS256 JWTs signed with the project's JWT secret and carry the
    user id in the ``sub`` claim.
    """
    try:
        payload = jose_jwt.decode(
            token,
            AUTH_JWT_SECRET,
            algorithms=[AUTH_JWT_ALGORITHM],
            audience=AUTH_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        logger.info("ℹ️ Expired access token presented")
        raise Unauthenticated("Token has expired. Please refresh your session.") from e
    except JWTError as e:
        logger.warning(f"⚠️ Token verification failed: {e}")
        raise Unauthenticated("Invalid token") from e

    if not payload.get("sub"):
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise Unauthenticated("Invalid token claims")

    return payload


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Actor:
    """Resolve the requesting actor (id + role) once per request"""
    if not credentials:
        raise Unauthenticated(
            "Not authenticated. Please provide a valid Bearer token in the Authorization header."
        )

    payload = verify_access_token(credentials.credentials)
    user_id = payload["sub"]

    user = AppointmentRepository.get_user_by_id(db, user_id)
    if not user:
        logger.warning(f"⚠️ Token subject {user_id} has no user profile")
        raise Unauthenticated("User profile not found")

    role = Role.parse(user.role)
    if role is None:
        logger.warning(f"⚠️ User {user_id} has unrecognised role {user.role!r}; all checks will deny")

    logger.debug(f"✅ Actor resolved: {user_id} ({role})")
    return Actor(id=user.id, role=role)

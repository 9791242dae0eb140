import logging
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from streamline.config import settings
from streamline.core.errors import Unauthorized, BadRequest
from streamline.core.timeutils import utcnow
from streamline.db.session import get_db
from streamline.db.models.auth_session import AuthSession
from streamline.db.models.user import User

logger = logging.getLogger(__name__)

# Used to extract token from Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

ACCESS_PURPOSE = "access"
VERIFY_EMAIL_PURPOSE = "verify-email"
RESET_PASSWORD_PURPOSE = "reset-password"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "purpose": to_encode.get("purpose", ACCESS_PURPOSE)})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_session_token(auth_session: AuthSession, email: str) -> str:
    return create_access_token({"sub": email, "sid": auth_session.id})


def create_email_token(email: str, purpose: str, expires_delta: timedelta, **claims) -> str:
    """Signed single-purpose token for verification and password reset links."""
    return create_access_token({"sub": email, "purpose": purpose, **claims}, expires_delta)


def decode_email_token(token: str, purpose: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning("Rejected %s token: %s", purpose, e)
        raise BadRequest("Invalid or expired token")

    if payload.get("purpose") != purpose or not payload.get("sub"):
        raise BadRequest("Invalid or expired token")
    return payload


def get_current_session(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> AuthSession:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.error("JWT decode failed: %s", str(e))
        raise Unauthorized(f"Token is invalid: {str(e)}")

    session_id = payload.get("sid")
    if payload.get("purpose") != ACCESS_PURPOSE or session_id is None:
        logger.warning("JWT token missing 'sid' claim")
        raise Unauthorized()

    auth_session = db.query(AuthSession).filter(AuthSession.id == session_id).first()
    if auth_session is None or auth_session.is_expired:
        logger.warning("Unknown or expired session: %s", session_id)
        raise Unauthorized("Session expired")

    if auth_session.user.email != payload.get("sub"):
        raise Unauthorized()

    return auth_session


def get_current_user(auth_session: AuthSession = Depends(get_current_session)) -> User:
    return auth_session.user

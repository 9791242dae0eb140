import logging
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode

from sqlalchemy.orm import Session

from streamline.config import settings
from streamline.core.errors import BadRequest, Forbidden, NotFound, Unauthorized, commit_or_conflict
from streamline.core.hashing import Hasher
from streamline.core import mailer
from streamline.core.security import (
    RESET_PASSWORD_PURPOSE,
    VERIFY_EMAIL_PURPOSE,
    create_email_token,
    create_session_token,
    decode_email_token,
)
from streamline.core.timeutils import utcnow
from streamline.db.models.auth_session import AuthSession
from streamline.db.models.organization import Member
from streamline.db.models.user import User
from streamline.emails.reset_password_email import reset_password_email
from streamline.emails.verification_email import verification_email
from . import schemas

logger = logging.getLogger(__name__)


def _app_link(path: str, **params) -> str:
    return f"{settings.APP_URL}{path}?{urlencode(params)}"


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email.lower()).first()


def register_user(db: Session, user: schemas.UserCreate) -> User:
    if get_user_by_email(db, user.email):
        raise BadRequest("Email already registered")

    new_user = User(
        name=user.name,
        email=user.email.lower(),
        hashed_password=Hasher.hash_password(user.password),
        email_verified=not settings.REQUIRE_EMAIL_VERIFICATION,
    )
    db.add(new_user)
    # Concurrent sign-ups with the same address race past the lookup above
    commit_or_conflict(db, "Email already registered")
    db.refresh(new_user)
    logger.info("Registered user %s", new_user.id)

    if settings.REQUIRE_EMAIL_VERIFICATION:
        send_verification_email(new_user)
    return new_user


def send_verification_email(user: User):
    token = create_email_token(
        user.email, VERIFY_EMAIL_PURPOSE, timedelta(hours=settings.VERIFICATION_TOKEN_EXPIRE_HOURS)
    )
    mailer.send_email(verification_email(user.email, user.name, _app_link("/verify-email", token=token)))


def verify_email(db: Session, token: str) -> User:
    payload = decode_email_token(token, VERIFY_EMAIL_PURPOSE)
    user = get_user_by_email(db, payload["sub"])
    if not user:
        raise BadRequest("Invalid or expired token")

    if not user.email_verified:
        user.email_verified = True
        db.commit()
        db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not Hasher.verify_password(password, user.hashed_password):
        raise Unauthorized("Invalid credentials")
    if settings.REQUIRE_EMAIL_VERIFICATION and not user.email_verified:
        raise Forbidden("Email not verified")
    return user


def start_session(db: Session, user: User) -> AuthSession:
    """Open a session whose active organization is the user's first membership."""
    first_membership = db.query(Member).filter(Member.user_id == user.id).order_by(
        Member.created_at, Member.id
    ).first()

    auth_session = AuthSession(
        user_id=user.id,
        active_organization_id=first_membership.organization_id if first_membership else None,
        expires_at=utcnow() + timedelta(days=settings.SESSION_EXPIRE_DAYS),
    )
    db.add(auth_session)
    db.commit()
    db.refresh(auth_session)
    return auth_session


def issue_token(db: Session, user: User) -> dict:
    auth_session = start_session(db, user)
    return {"access_token": create_session_token(auth_session, user.email), "token_type": "bearer"}


def end_session(db: Session, auth_session: AuthSession):
    db.delete(auth_session)
    db.commit()


def _password_stamp(user: User) -> Optional[str]:
    return user.password_changed_at.isoformat() if user.password_changed_at else None


def request_password_reset(db: Session, email: str):
    # Same response whether or not the account exists
    user = get_user_by_email(db, email)
    if not user:
        logger.info("Password reset requested for unknown email")
        return

    token = create_email_token(
        user.email,
        RESET_PASSWORD_PURPOSE,
        timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
        pwd=_password_stamp(user),
    )
    mailer.send_email(reset_password_email(user.email, user.name, _app_link("/reset-password", token=token)))


def reset_password(db: Session, token: str, password: str):
    payload = decode_email_token(token, RESET_PASSWORD_PURPOSE)
    user = get_user_by_email(db, payload["sub"])
    # A link is spent once the password it was issued against has changed
    if not user or payload.get("pwd") != _password_stamp(user):
        raise BadRequest("Invalid or expired token")

    user.hashed_password = Hasher.hash_password(password)
    user.password_changed_at = utcnow()
    # Following the reset link proves ownership of the address
    user.email_verified = True
    db.query(AuthSession).filter(AuthSession.user_id == user.id).delete()
    db.commit()
    logger.info("Password reset for user %s, sessions revoked", user.id)


def set_active_organization(db: Session, auth_session: AuthSession, organization_id: int) -> AuthSession:
    membership = db.query(Member).filter(
        Member.user_id == auth_session.user_id,
        Member.organization_id == organization_id
    ).first()
    if not membership:
        raise NotFound("Organization not found")

    auth_session.active_organization_id = organization_id
    db.commit()
    db.refresh(auth_session)
    return auth_session


def purge_expired_sessions(db: Session) -> int:
    count = db.query(AuthSession).filter(AuthSession.expires_at <= utcnow()).delete(synchronize_session=False)
    db.commit()
    return count

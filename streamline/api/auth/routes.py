from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from streamline.db.session import get_db
from streamline.db.models.auth_session import AuthSession
from streamline.core.security import get_current_session
from . import schemas, services

router = APIRouter()


@router.post("/register")
def register(user: schemas.UserCreate, db: Session = Depends(get_db)):
    services.register_user(db, user)
    return {"message": "User created successfully, check your inbox to verify your email"}


@router.get("/verify-email", response_model=schemas.Token)
def verify_email(token: str, db: Session = Depends(get_db)):
    user = services.verify_email(db, token)
    return services.issue_token(db, user)


@router.post("/login", response_model=schemas.Token)
def login(credentials: schemas.UserLogin, db: Session = Depends(get_db)):
    user = services.authenticate(db, credentials.email, credentials.password)
    return services.issue_token(db, user)


@router.post("/logout")
def logout(
    auth_session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db)
):
    services.end_session(db, auth_session)
    return {"message": "Signed out"}


@router.post("/forgot-password")
def forgot_password(payload: schemas.ForgotPassword, db: Session = Depends(get_db)):
    services.request_password_reset(db, payload.email)
    return {"message": "If an account exists for this email, a reset link has been sent"}


@router.post("/reset-password")
def reset_password(payload: schemas.ResetPassword, db: Session = Depends(get_db)):
    services.reset_password(db, payload.token, payload.password)
    return {"message": "Password updated"}


@router.get("/session", response_model=schemas.SessionOut)
def read_session(auth_session: AuthSession = Depends(get_current_session)):
    return auth_session


@router.put("/session/active-organization", response_model=schemas.SessionOut)
def switch_organization(
    payload: schemas.ActiveOrganizationUpdate,
    auth_session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db)
):
    return services.set_active_organization(db, auth_session, payload.organization_id)

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from streamline.db.session import get_db
from streamline.db.models.auth_session import AuthSession
from streamline.db.models.user import User
from streamline.core.context import OrgContext, get_org_context
from streamline.core.security import get_current_session, get_current_user
from . import schemas, services

router = APIRouter()
invitations_router = APIRouter()


@router.post("/", response_model=schemas.OrganizationOut)
def create_organization(
    payload: schemas.OrganizationCreate,
    db: Session = Depends(get_db),
    auth_session: AuthSession = Depends(get_current_session)
):
    return services.create_organization(db, auth_session, payload)


@router.get("/", response_model=list[schemas.OrganizationOut])
def my_organizations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return services.get_organizations(db, current_user)


@router.get("/active", response_model=schemas.FullOrganizationOut)
def active_organization(
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.get_full_organization(db, ctx)


@router.post("/active/invitations", response_model=schemas.InvitationOut)
def invite_member(
    payload: schemas.InvitationCreate,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.invite_member(db, ctx, payload)


@router.delete("/active/invitations/{invitation_id}", response_model=schemas.InvitationOut)
def cancel_invitation(
    invitation_id: str,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    return services.cancel_invitation(db, ctx, invitation_id)


@router.delete("/active/members/{member_id}")
def remove_member(
    member_id: int,
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    services.remove_member(db, ctx, member_id)
    return {"success": True, "id": member_id}


@router.post("/active/leave")
def leave_organization(
    db: Session = Depends(get_db),
    ctx: OrgContext = Depends(get_org_context)
):
    services.leave_organization(db, ctx)
    return {"success": True}


@invitations_router.get("/{invitation_id}", response_model=schemas.InvitationOut)
def read_invitation(
    invitation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return services.get_invitation(db, current_user, invitation_id)


@invitations_router.post("/{invitation_id}/accept", response_model=schemas.InvitationOut)
def accept_invitation(
    invitation_id: str,
    db: Session = Depends(get_db),
    auth_session: AuthSession = Depends(get_current_session)
):
    return services.accept_invitation(db, auth_session, invitation_id)


@invitations_router.post("/{invitation_id}/reject", response_model=schemas.InvitationOut)
def reject_invitation(
    invitation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return services.reject_invitation(db, current_user, invitation_id)

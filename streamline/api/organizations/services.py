import logging
from datetime import timedelta
from typing import List

from sqlalchemy.orm import Session

from streamline.config import settings
from streamline.core.context import OrgContext
from streamline.core.errors import BadRequest, Conflict, Forbidden, NotFound, commit_or_conflict
from streamline.core import mailer
from streamline.core.timeutils import utcnow
from streamline.db.models.auth_session import AuthSession
from streamline.db.models.organization import Organization, Member, Invitation, MemberRole, InvitationStatus
from streamline.db.models.user import User
from streamline.emails.workspace_invite_email import workspace_invite_email
from . import schemas
from .schemas import MemberAction

logger = logging.getLogger(__name__)

SLUG_TAKEN = "An organization with this slug already exists"


# ---------------------------
# Organizations
# ---------------------------

def create_organization(db: Session, auth_session: AuthSession, payload: schemas.OrganizationCreate):
    if db.query(Organization).filter(Organization.slug == payload.slug).first():
        raise Conflict(SLUG_TAKEN)

    organization = Organization(**payload.model_dump())
    organization.members.append(Member(user_id=auth_session.user_id, role=MemberRole.OWNER))
    db.add(organization)
    db.flush()

    # Onboarding: the first workspace becomes the active one
    if auth_session.active_organization_id is None:
        auth_session.active_organization_id = organization.id

    commit_or_conflict(db, SLUG_TAKEN)
    db.refresh(organization)
    logger.info("User %s created organization %s", auth_session.user_id, organization.id)
    return organization


def get_organizations(db: Session, user: User):
    return db.query(Organization).join(Organization.members).filter(
        Member.user_id == user.id
    ).order_by(Member.created_at, Organization.id).all()


def get_membership(db: Session, ctx: OrgContext) -> Member:
    member = db.query(Member).filter(
        Member.organization_id == ctx.organization_id,
        Member.user_id == ctx.user_id
    ).first()
    if not member:
        raise NotFound("Organization not found")
    return member


def _require_manager(db: Session, ctx: OrgContext) -> Member:
    member = get_membership(db, ctx)
    if not member.can_manage:
        raise Forbidden("Only owners and admins can manage members")
    return member


# ---------------------------
# Members page
# ---------------------------

def member_actions(viewer: Member, member: Member) -> List[MemberAction]:
    if member.role == MemberRole.OWNER:
        return []
    if member.user_id == viewer.user_id:
        return [MemberAction.LEAVE]
    if viewer.can_manage:
        return [MemberAction.REMOVE_MEMBER]
    return []


def invitation_actions(viewer: Member) -> List[MemberAction]:
    return [MemberAction.CANCEL_INVITATION] if viewer.can_manage else []


def get_full_organization(db: Session, ctx: OrgContext) -> dict:
    viewer = get_membership(db, ctx)
    organization = viewer.organization

    members = db.query(Member).filter(Member.organization_id == organization.id).order_by(
        Member.created_at, Member.id
    ).all()
    invitations = db.query(Invitation).filter(
        Invitation.organization_id == organization.id,
        Invitation.status == InvitationStatus.PENDING,
        Invitation.expires_at > utcnow()
    ).order_by(Invitation.created_at).all()

    rows = [
        schemas.MemberRow(
            id=m.id,
            user=schemas.UserBrief.model_validate(m.user),
            role=m.role,
            created_at=m.created_at,
            allowed_actions=member_actions(viewer, m),
        )
        for m in members
    ]
    rows += [
        schemas.InvitationRow(
            id=i.id,
            email=i.email,
            role=i.role,
            status=i.status,
            expires_at=i.expires_at,
            allowed_actions=invitation_actions(viewer),
        )
        for i in invitations
    ]

    return {
        **schemas.OrganizationOut.model_validate(organization).model_dump(),
        "role": viewer.role,
        "rows": rows,
    }


def remove_member(db: Session, ctx: OrgContext, member_id: int):
    _require_manager(db, ctx)

    member = db.query(Member).filter(
        Member.id == member_id,
        Member.organization_id == ctx.organization_id
    ).first()
    if not member:
        raise NotFound("Member not found")
    if member.role == MemberRole.OWNER:
        raise Forbidden("The owner cannot be removed")
    if member.user_id == ctx.user_id:
        raise BadRequest("Use leave to remove yourself from the organization")

    user_id = member.user_id
    _detach_sessions(db, user_id, ctx.organization_id)
    db.delete(member)
    db.commit()
    logger.info("Removed user %s from organization %s", user_id, ctx.organization_id)


def leave_organization(db: Session, ctx: OrgContext):
    member = get_membership(db, ctx)
    if member.role == MemberRole.OWNER:
        raise Forbidden("The owner cannot leave the organization")

    _detach_sessions(db, ctx.user_id, ctx.organization_id)
    db.delete(member)
    db.flush()

    # Fall back to another workspace, if any
    next_membership = db.query(Member).filter(Member.user_id == ctx.user_id).order_by(
        Member.created_at, Member.id
    ).first()
    ctx.session.active_organization_id = next_membership.organization_id if next_membership else None
    db.commit()


def _detach_sessions(db: Session, user_id: int, organization_id: int):
    db.query(AuthSession).filter(
        AuthSession.user_id == user_id,
        AuthSession.active_organization_id == organization_id
    ).update({AuthSession.active_organization_id: None}, synchronize_session="fetch")


# ---------------------------
# Invitations
# ---------------------------

def invite_member(db: Session, ctx: OrgContext, payload: schemas.InvitationCreate):
    inviter = _require_manager(db, ctx)
    email = payload.email.lower()

    already_member = db.query(Member).join(Member.user).filter(
        Member.organization_id == ctx.organization_id,
        User.email == email
    ).first()
    if already_member:
        raise Conflict("User is already a member of this organization")

    pending = db.query(Invitation).filter(
        Invitation.organization_id == ctx.organization_id,
        Invitation.email == email,
        Invitation.status == InvitationStatus.PENDING,
        Invitation.expires_at > utcnow()
    ).first()
    if pending:
        raise Conflict("User is already invited to this organization")

    invitation = Invitation(
        organization_id=ctx.organization_id,
        email=email,
        role=payload.role,
        inviter_id=ctx.user_id,
        expires_at=utcnow() + timedelta(hours=settings.INVITATION_EXPIRE_HOURS),
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)
    logger.info("Invitation %s sent for organization %s", invitation.id, ctx.organization_id)

    mailer.send_email(workspace_invite_email(
        to=email,
        inviter_name=inviter.user.name,
        workspace_name=invitation.organization.name,
        invite_url=f"{settings.APP_URL}/accept-invitation?invite={invitation.id}",
        role=invitation.role.value,
    ))
    return invitation


def cancel_invitation(db: Session, ctx: OrgContext, invitation_id: str):
    _require_manager(db, ctx)

    invitation = db.query(Invitation).filter(
        Invitation.id == invitation_id,
        Invitation.organization_id == ctx.organization_id,
        Invitation.status == InvitationStatus.PENDING
    ).first()
    if not invitation:
        raise NotFound("Invitation not found")

    invitation.status = InvitationStatus.CANCELED
    db.commit()
    db.refresh(invitation)
    return invitation


def get_invitation(db: Session, user: User, invitation_id: str) -> Invitation:
    """Invitations are only visible to the address they were sent to."""
    invitation = db.query(Invitation).filter(
        Invitation.id == invitation_id,
        Invitation.email == user.email.lower()
    ).first()
    if not invitation:
        raise NotFound("Invitation not found")
    return invitation


def _pending_invitation(db: Session, user: User, invitation_id: str) -> Invitation:
    invitation = get_invitation(db, user, invitation_id)
    if invitation.status != InvitationStatus.PENDING:
        raise BadRequest(f"Invitation is {invitation.status.value}")
    if invitation.is_expired:
        invitation.status = InvitationStatus.EXPIRED
        db.commit()
        raise BadRequest("Invitation has expired")
    return invitation


def accept_invitation(db: Session, auth_session: AuthSession, invitation_id: str) -> Invitation:
    user = auth_session.user
    if settings.REQUIRE_EMAIL_VERIFICATION and not user.email_verified:
        raise Forbidden("Verify your email before accepting invitations")

    invitation = _pending_invitation(db, user, invitation_id)

    exists = db.query(Member).filter(
        Member.organization_id == invitation.organization_id,
        Member.user_id == user.id
    ).first()
    if not exists:
        db.add(Member(organization_id=invitation.organization_id, user_id=user.id, role=invitation.role))

    invitation.status = InvitationStatus.ACCEPTED
    auth_session.active_organization_id = invitation.organization_id
    commit_or_conflict(db, "User is already a member of this organization")
    db.refresh(invitation)
    logger.info("User %s joined organization %s", user.id, invitation.organization_id)
    return invitation


def reject_invitation(db: Session, user: User, invitation_id: str) -> Invitation:
    invitation = _pending_invitation(db, user, invitation_id)
    invitation.status = InvitationStatus.REJECTED
    db.commit()
    db.refresh(invitation)
    return invitation


def expire_invitations(db: Session) -> int:
    """Mark every pending invitation past its deadline as expired."""
    count = db.query(Invitation).filter(
        Invitation.status == InvitationStatus.PENDING,
        Invitation.expires_at <= utcnow()
    ).update({Invitation.status: InvitationStatus.EXPIRED}, synchronize_session=False)
    db.commit()
    return count

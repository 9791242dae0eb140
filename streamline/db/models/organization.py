import enum
import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from streamline.core.timeutils import utcnow
from streamline.db.session import Base


class MemberRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELED = "canceled"
    EXPIRED = "expired"


member_role_type = Enum(
    MemberRole, name="member_role", values_callable=lambda e: [m.value for m in e]
)
invitation_status_type = Enum(
    InvitationStatus, name="invitation_status", values_callable=lambda e: [s.value for s in e]
)


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(50), unique=True, index=True, nullable=False)
    logo = Column(String, nullable=True)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    members = relationship("Member", back_populates="organization", cascade="all, delete")
    invitations = relationship("Invitation", back_populates="organization", cascade="all, delete")
    projects = relationship("Project", back_populates="organization", cascade="all, delete")


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_members_organization_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(member_role_type, default=MemberRole.MEMBER, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    organization = relationship("Organization", back_populates="members")
    user = relationship("User", back_populates="memberships")

    @property
    def can_manage(self) -> bool:
        return self.role in (MemberRole.OWNER, MemberRole.ADMIN)


class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    email = Column(String, nullable=False, index=True)
    role = Column(member_role_type, default=MemberRole.MEMBER, nullable=False)
    status = Column(invitation_status_type, default=InvitationStatus.PENDING, nullable=False)
    inviter_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    organization = relationship("Organization", back_populates="invitations")
    inviter = relationship("User")

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= utcnow()

import enum
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator

from streamline.api.auth.schemas import UserBrief
from streamline.db.models.organization import MemberRole, InvitationStatus

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class MemberAction(str, enum.Enum):
    CANCEL_INVITATION = "cancel_invitation"
    REMOVE_MEMBER = "remove_member"
    LEAVE = "leave"


class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=50, pattern=SLUG_PATTERN)
    logo: Optional[str] = None
    description: Optional[str] = None


class OrganizationOut(BaseModel):
    id: int
    name: str
    slug: str
    logo: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = {
        "from_attributes": True
    }


class InvitationCreate(BaseModel):
    email: EmailStr
    role: MemberRole = MemberRole.MEMBER

    @field_validator("role")
    @classmethod
    def not_owner(cls, value: MemberRole) -> MemberRole:
        if value == MemberRole.OWNER:
            raise ValueError("Invitations can only grant the member or admin role")
        return value


class InvitationOut(BaseModel):
    id: str
    email: str
    role: MemberRole
    status: InvitationStatus
    expires_at: datetime
    organization: OrganizationOut
    inviter: Optional[UserBrief] = None

    model_config = {
        "from_attributes": True
    }


class MemberRow(BaseModel):
    kind: Literal["member"] = "member"
    id: int
    user: UserBrief
    role: MemberRole
    created_at: datetime
    allowed_actions: List[MemberAction] = []


class InvitationRow(BaseModel):
    kind: Literal["invitation"] = "invitation"
    id: str
    email: str
    role: MemberRole
    status: InvitationStatus
    expires_at: datetime
    allowed_actions: List[MemberAction] = []


MembershipRow = Annotated[Union[MemberRow, InvitationRow], Field(discriminator="kind")]


class FullOrganizationOut(OrganizationOut):
    role: MemberRole
    rows: List[MembershipRow]

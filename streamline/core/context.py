from dataclasses import dataclass

from fastapi import Depends

from streamline.core.errors import BadRequest
from streamline.core.security import get_current_session
from streamline.db.models.auth_session import AuthSession
from streamline.db.models.user import User


@dataclass(frozen=True)
class OrgContext:
    """Caller identity plus the organization every board query is scoped to."""

    user: User
    session: AuthSession
    organization_id: int

    @property
    def user_id(self) -> int:
        return self.user.id


def get_org_context(auth_session: AuthSession = Depends(get_current_session)) -> OrgContext:
    if not auth_session.active_organization_id:
        raise BadRequest("No active organization selected")
    return OrgContext(
        user=auth_session.user,
        session=auth_session,
        organization_id=auth_session.active_organization_id,
    )

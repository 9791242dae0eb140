from streamline.config import settings
from streamline.core.mailer import EmailMessage
from streamline.emails.layout import render


def role_description(role: str) -> str:
    descriptions = {
        "owner": "as an owner with full administrative privileges",
        "admin": "as an admin with management capabilities",
        "member": "as a team member",
    }
    return descriptions.get(role.lower(), f"as a {role}")


def workspace_invite_email(to: str, inviter_name: str, workspace_name: str, invite_url: str,
                           role: str = "member") -> EmailMessage:
    html, text = render(
        "workspace_invite_email",
        inviter_name=inviter_name,
        workspace_name=workspace_name,
        url=invite_url,
        role=role,
        role_description=role_description(role),
        expire_hours=settings.INVITATION_EXPIRE_HOURS,
    )
    return EmailMessage(
        to=to,
        subject=f"You're invited to join {workspace_name} on {settings.APP_NAME}",
        html=html,
        text=text,
    )

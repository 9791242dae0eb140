from streamline.config import settings
from streamline.core.mailer import EmailMessage
from streamline.emails.layout import render


def verification_email(to: str, user_name: str, verification_url: str) -> EmailMessage:
    html, text = render(
        "verification_email",
        user_name=user_name,
        url=verification_url,
        expire_hours=settings.VERIFICATION_TOKEN_EXPIRE_HOURS,
    )
    return EmailMessage(to=to, subject=f"Verify your {settings.APP_NAME} account", html=html, text=text)

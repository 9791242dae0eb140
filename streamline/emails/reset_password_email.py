from streamline.config import settings
from streamline.core.mailer import EmailMessage
from streamline.emails.layout import render


def reset_password_email(to: str, user_name: str, reset_url: str) -> EmailMessage:
    html, text = render(
        "reset_password_email",
        user_name=user_name,
        url=reset_url,
        expire_minutes=settings.RESET_TOKEN_EXPIRE_MINUTES,
    )
    return EmailMessage(to=to, subject=f"Reset your {settings.APP_NAME} password", html=html, text=text)

from typing import Optional

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    SESSION_EXPIRE_DAYS: int = 7
    ENV: str = "local"  # Environment setting
    LOG_LEVEL: str = "INFO"

    # Public app settings (used in email links)
    APP_NAME: str = "Streamline"
    APP_URL: str = "http://localhost:3000"

    REQUIRE_EMAIL_VERIFICATION: bool = True
    VERIFICATION_TOKEN_EXPIRE_HOURS: int = 24
    RESET_TOKEN_EXPIRE_MINUTES: int = 60
    INVITATION_EXPIRE_HOURS: int = 48

    # Resend transactional email; empty key disables delivery
    RESEND_API_KEY: Optional[str] = None
    RESEND_FROM_EMAIL: str = "Streamline <no-reply@streamline.dev>"

    SCHEDULER_ENABLED: bool = True

    class Config:
        env_file = ".env"

settings = Settings()

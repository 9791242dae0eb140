import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

PASSWORD_RULES = (
    (r"[a-z]", "one lowercase letter"),
    (r"[A-Z]", "one uppercase letter"),
    (r"\d", "one number"),
    (r"[@$!%*?&]", "one special character"),
)


def check_password_strength(password: str) -> str:
    missing = [rule for pattern, rule in PASSWORD_RULES if not re.search(pattern, password)]
    if missing:
        raise ValueError("Password must contain at least " + ", ".join(missing))
    return password


class UserBrief(BaseModel):
    id: int
    name: str
    email: str
    image: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ForgotPassword(BaseModel):
    email: EmailStr


class ResetPassword(BaseModel):
    token: str
    password: str = Field(min_length=8)

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)


class SessionOut(BaseModel):
    user: UserBrief
    active_organization_id: Optional[int] = None
    expires_at: datetime

    model_config = {
        "from_attributes": True
    }


class ActiveOrganizationUpdate(BaseModel):
    organization_id: int

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from academy.domains.identity.models import AppRole


class SignUpIn(BaseModel):
    display_name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    mobile_number: str = Field(min_length=9, max_length=20)


class SignInIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: AppRole


class PasswordResetIn(BaseModel):
    mobile_number: str = Field(min_length=9, max_length=20)
    new_password: str = Field(min_length=6, max_length=128)


class PasswordResetOut(BaseModel):
    success: bool = True
    message: str = "Password updated successfully"


class ProfileOut(BaseModel):
    id: str
    email: str
    display_name: str | None = None
    mobile_number: str | None = None
    avatar_url: str | None = None
    role: AppRole
    created_at: datetime


class ProfileUpdateIn(BaseModel):
    display_name: str | None = Field(default=None, min_length=2, max_length=100)
    avatar_url: str | None = Field(default=None, max_length=1024)


class AvatarOut(BaseModel):
    avatar_url: str

from typing import Literal

from pydantic import BaseModel, Field


class AdminNotifyIn(BaseModel):
    type: Literal["new_registration", "new_payment"]
    user_name: str = Field(min_length=1, max_length=100)
    user_email: str = Field(min_length=1, max_length=255)
    user_mobile: str = Field(min_length=1, max_length=20)
    course_name: str | None = Field(default=None, max_length=200)


class UserNotifyIn(BaseModel):
    user_name: str = Field(min_length=1, max_length=100)
    user_mobile: str = Field(min_length=9, max_length=20)
    course_name: str = Field(min_length=1, max_length=200)


class RegistrationEmailIn(BaseModel):
    # Checked in the service so the messages match the registration form.
    name: str = ""
    email: str = ""
    phone: str = ""
    course: str = ""


class NotificationOut(BaseModel):
    success: bool
    message: str | None = None

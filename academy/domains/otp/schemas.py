from pydantic import BaseModel, Field

from academy.domains.otp.models import OtpPurpose


class OtpSendIn(BaseModel):
    mobile_number: str = Field(min_length=9, max_length=20)
    purpose: OtpPurpose = OtpPurpose.REGISTRATION


class OtpSendOut(BaseModel):
    success: bool = True
    message: str = "OTP sent successfully"
    expires_in_seconds: int
    dev_otp: str | None = None


class OtpVerifyIn(BaseModel):
    mobile_number: str = Field(min_length=9, max_length=20)
    otp: str = Field(min_length=4, max_length=10)
    purpose: OtpPurpose = OtpPurpose.REGISTRATION


class OtpVerifyOut(BaseModel):
    success: bool = True
    message: str = "OTP verified successfully"

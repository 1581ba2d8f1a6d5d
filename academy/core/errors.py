from fastapi import status


class AppError(Exception):
    """Base for failures that are reported to the client as `{"error": ...}`."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "APP_ERROR"
    message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationFailed(AppError):
    code = "VALIDATION_FAILED"
    message = "Invalid input"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    message = "Authentication required"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "You don't have permission to access this resource"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    message = "Already exists"


# OTP


class OtpNotFound(AppError):
    code = "OTP_NOT_FOUND"
    message = "OTP expired or not found. Please request a new one."


class OtpMismatch(AppError):
    code = "OTP_MISMATCH"
    message = "Invalid OTP"


class OtpSendError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "OTP_SEND_FAILED"
    message = "Failed to send SMS"


# Coupons


class InvalidCoupon(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "COUPON_INVALID"
    message = "Invalid coupon code"


class CouponNotApplicable(AppError):
    code = "COUPON_NOT_APPLICABLE"
    message = "This coupon is not valid for this course"


class CouponExhausted(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "COUPON_EXHAUSTED"
    message = "This coupon has reached its maximum uses"


class CouponExpired(AppError):
    code = "COUPON_EXPIRED"
    message = "This coupon has expired"


# Workflows


class RegistrationFailed(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "REGISTRATION_FAILED"
    message = "Registration failed. Please try again."


class StorageError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORAGE_ERROR"
    message = "File storage failed"

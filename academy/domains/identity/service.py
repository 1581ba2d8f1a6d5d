import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.core.db import utcnow
from academy.core.errors import Conflict, NotFound, Unauthorized, ValidationFailed
from academy.core.security import create_access_token, hash_password, verify_password
from academy.domains.identity.models import AppRole, Profile, UserRole
from academy.domains.otp.models import OtpPurpose
from academy.domains.otp.service import consume_otp, find_verified_otp
from academy.utils.storage import AVATARS, ObjectStorage, build_object_key

logger = logging.getLogger(__name__)


def get_profile(db: Session, user_id: str) -> Profile:
    profile = db.get(Profile, user_id)
    if profile is None:
        raise NotFound("Profile not found")
    return profile


def get_role(db: Session, user_id: str) -> AppRole:
    row = db.query(UserRole).filter(UserRole.user_id == user_id).one_or_none()
    return row.role if row else AppRole.USER


def set_role(db: Session, user_id: str, role: AppRole) -> UserRole:
    get_profile(db, user_id)
    row = db.query(UserRole).filter(UserRole.user_id == user_id).one_or_none()
    if row is None:
        row = UserRole(user_id=user_id, role=role)
        db.add(row)
    else:
        row.role = role
    db.commit()
    db.refresh(row)
    return row


def issue_token(profile: Profile, role: AppRole) -> str:
    return create_access_token(sub=profile.id, role=role.value, email=profile.email)


def sign_up(db: Session, *, email: str, password: str, display_name: str, mobile_number: str) -> tuple[Profile, AppRole]:
    email = email.strip().lower()
    if db.query(Profile).filter(func.lower(Profile.email) == email).one_or_none():
        raise Conflict("This email is already registered. Please sign in instead.")
    if db.query(Profile).filter(Profile.mobile_number == mobile_number).one_or_none():
        raise Conflict("This mobile number is already registered.")

    otp = find_verified_otp(db, mobile_number, OtpPurpose.REGISTRATION)
    if otp is None:
        raise ValidationFailed("Please verify your mobile number first")

    # The first account bootstraps the admin console.
    role = AppRole.ADMIN if db.query(Profile).count() == 0 else AppRole.USER

    profile = Profile(
        email=email,
        password_hash=hash_password(password),
        display_name=display_name.strip(),
        mobile_number=mobile_number,
    )
    try:
        db.add(profile)
        db.flush()
        db.add(UserRole(user_id=profile.id, role=role))
        consume_otp(db, otp)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Sign-up lost a uniqueness race email=%s: %s", email, e.orig)
        raise Conflict("This email or mobile number is already registered.")
    db.refresh(profile)
    logger.info("Created account user_id=%s role=%s", profile.id, role.value)
    return profile, role


def sign_in(db: Session, *, email: str, password: str) -> tuple[Profile, AppRole]:
    profile = db.query(Profile).filter(func.lower(Profile.email) == email.strip().lower()).one_or_none()
    if profile is None or not verify_password(password, profile.password_hash):
        raise Unauthorized("Invalid email or password. Please try again.")
    return profile, get_role(db, profile.id)


def reset_password(db: Session, *, mobile_number: str, new_password: str) -> Profile:
    otp = find_verified_otp(db, mobile_number, OtpPurpose.PASSWORD_RESET)
    if otp is None:
        raise ValidationFailed("Please verify your mobile number first")

    profile = db.query(Profile).filter(Profile.mobile_number == mobile_number).one_or_none()
    if profile is None:
        raise NotFound("No account found with this mobile number")

    profile.password_hash = hash_password(new_password)
    profile.updated_at = utcnow()
    consume_otp(db, otp)
    db.commit()
    db.refresh(profile)
    return profile


def update_profile(db: Session, user_id: str, *, display_name: str | None, avatar_url: str | None) -> Profile:
    profile = get_profile(db, user_id)
    if display_name is not None:
        profile.display_name = display_name.strip()
    if avatar_url is not None:
        profile.avatar_url = avatar_url or None
    profile.updated_at = utcnow()
    db.commit()
    db.refresh(profile)
    return profile


def upload_avatar(storage: ObjectStorage, user_id: str, *, filename: str | None, content_type: str | None, data: bytes, max_bytes: int) -> str:
    if not (content_type or "").startswith("image/"):
        raise ValidationFailed("Please upload an image file.")
    if len(data) > max_bytes:
        raise ValidationFailed(f"Please upload an image smaller than {max_bytes // (1024 * 1024)}MB.")
    key = build_object_key(user_id, filename)
    storage.upload(AVATARS, key, data, upsert=True)
    return storage.public_url(AVATARS, key)


def list_users(db: Session) -> list[tuple[Profile, AppRole]]:
    roles = {r.user_id: r.role for r in db.query(UserRole).all()}
    profiles = db.query(Profile).order_by(Profile.created_at.asc()).all()
    return [(p, roles.get(p.id, AppRole.USER)) for p in profiles]

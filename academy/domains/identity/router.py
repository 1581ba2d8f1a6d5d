from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.deps import get_db, get_storage, require_user
from academy.core.security import Principal
from academy.domains.identity.models import AppRole, Profile
from academy.domains.identity.schemas import (
    AvatarOut,
    PasswordResetIn,
    PasswordResetOut,
    ProfileOut,
    ProfileUpdateIn,
    SessionOut,
    SignInIn,
    SignUpIn,
)
from academy.domains.identity.service import (
    get_profile,
    get_role,
    issue_token,
    reset_password,
    sign_in,
    sign_up,
    update_profile,
    upload_avatar,
)
from academy.domains.notifications.service import NEW_REGISTRATION, schedule_admin_notification
from academy.utils.phone import normalize_mobile
from academy.utils.storage import ObjectStorage


router = APIRouter()


def profile_out(profile: Profile, role: AppRole) -> ProfileOut:
    return ProfileOut(
        id=profile.id,
        email=profile.email,
        display_name=profile.display_name,
        mobile_number=profile.mobile_number,
        avatar_url=profile.avatar_url,
        role=role,
        created_at=profile.created_at,
    )


def _session(profile: Profile, role: AppRole) -> SessionOut:
    return SessionOut(access_token=issue_token(profile, role), user_id=profile.id, role=role)


@router.post("/auth/signup", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def signup(payload: SignUpIn, tasks: BackgroundTasks, db: Session = Depends(get_db)) -> SessionOut:
    profile, role = sign_up(
        db,
        email=str(payload.email),
        password=payload.password,
        display_name=payload.display_name,
        mobile_number=normalize_mobile(payload.mobile_number),
    )
    schedule_admin_notification(
        tasks,
        db,
        NEW_REGISTRATION,
        user_name=profile.display_name or "",
        user_email=profile.email,
        user_mobile=profile.mobile_number or "",
    )
    return _session(profile, role)


@router.post("/auth/signin", response_model=SessionOut)
def signin(payload: SignInIn, db: Session = Depends(get_db)) -> SessionOut:
    profile, role = sign_in(db, email=str(payload.email), password=payload.password)
    return _session(profile, role)


@router.post("/auth/reset-password", response_model=PasswordResetOut)
def password_reset(payload: PasswordResetIn, db: Session = Depends(get_db)) -> PasswordResetOut:
    reset_password(db, mobile_number=normalize_mobile(payload.mobile_number), new_password=payload.new_password)
    return PasswordResetOut()


@router.get("/auth/me", response_model=ProfileOut)
def me(principal: Principal = Depends(require_user), db: Session = Depends(get_db)) -> ProfileOut:
    return profile_out(get_profile(db, principal.sub), get_role(db, principal.sub))


@router.get("/profile", response_model=ProfileOut)
def read_profile(principal: Principal = Depends(require_user), db: Session = Depends(get_db)) -> ProfileOut:
    return profile_out(get_profile(db, principal.sub), get_role(db, principal.sub))


@router.patch("/profile", response_model=ProfileOut)
def edit_profile(
    payload: ProfileUpdateIn,
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
) -> ProfileOut:
    profile = update_profile(db, principal.sub, display_name=payload.display_name, avatar_url=payload.avatar_url)
    return profile_out(profile, get_role(db, principal.sub))


@router.post("/profile/avatar", response_model=AvatarOut)
def avatar_upload(
    file: UploadFile = File(...),
    principal: Principal = Depends(require_user),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> AvatarOut:
    url = upload_avatar(
        storage,
        principal.sub,
        filename=file.filename,
        content_type=file.content_type,
        data=file.file.read(),
        max_bytes=settings.avatar_max_bytes,
    )
    update_profile(db, principal.sub, display_name=None, avatar_url=url)
    return AvatarOut(avatar_url=url)

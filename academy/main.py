import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from academy.core.config import settings
from academy.core.db import Base, SessionLocal, engine
from academy.core.errors import AppError
from academy.domains.admin.router import router as admin_router
from academy.domains.coupons.router import router as coupons_router
from academy.domains.courses.router import router as courses_router
from academy.domains.courses.seed import seed_default_courses
from academy.domains.files.router import router as files_router
from academy.domains.identity.router import router as identity_router
from academy.domains.learning.router import router as learning_router
from academy.domains.notifications.router import router as notifications_router
from academy.domains.otp.router import router as otp_router
from academy.domains.payments.router import router as payments_router
from academy.domains.registrations.router import router as registrations_router
from academy.utils.sms import textlk_missing_fields

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)


@app.exception_handler(AppError)
async def _app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "code": f"HTTP_{exc.status_code}"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    # Do not log bodies: they may carry passwords and OTPs.
    if settings.env == "dev":
        logger.info("[422] path=%s errors=%s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "code": "INVALID_REQUEST", "details": jsonable_encoder(exc.errors())},
    )


origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip() and o.strip() != "*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins if origins else ["*"],
    allow_credentials=bool(origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup() -> None:
    # No migrations yet: tables are created on boot.
    Base.metadata.create_all(bind=engine)
    if settings.seed_courses_on_startup:
        with SessionLocal() as db:
            seed_default_courses(db)


@app.get("/health")
def health() -> dict:
    return {
        "ok": True,
        "service": settings.app_name,
        "env": settings.env,
        "otp_dev_mode": bool(settings.otp_dev_mode),
        "textlk_missing": textlk_missing_fields(),
    }


app.include_router(otp_router, tags=["otp"])
app.include_router(identity_router, tags=["identity"])
app.include_router(courses_router, tags=["courses"])
app.include_router(coupons_router, tags=["coupons"])
app.include_router(payments_router, tags=["payments"])
app.include_router(registrations_router, tags=["registrations"])
app.include_router(admin_router, tags=["admin"])
app.include_router(notifications_router, tags=["notifications"])
app.include_router(learning_router, tags=["learning"])
app.include_router(files_router, tags=["storage"])

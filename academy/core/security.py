import hashlib
import secrets
import time
from dataclasses import dataclass
from typing import Literal

import jwt

from academy.core.config import settings


Role = Literal["admin", "moderator", "user"]
ROLES: tuple[str, ...] = ("admin", "moderator", "user")

_PBKDF2_ITERATIONS = 260_000


def _now_s() -> int:
    return int(time.time())


def generate_otp() -> str:
    upper = 10**settings.otp_len
    lower = 10 ** (settings.otp_len - 1)
    return str(secrets.randbelow(upper - lower) + lower)


def hash_otp(mobile: str, otp: str) -> str:
    raw = f"{settings.jwt_secret}:{mobile}:{otp}".encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def verify_otp_hash(mobile: str, otp: str, expected_hash: str) -> bool:
    return secrets.compare_digest(hash_otp(mobile, otp), expected_hash)


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), _PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${_PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations))
    return secrets.compare_digest(digest.hex(), expected)


def create_access_token(*, sub: str, role: Role, email: str, extra: dict | None = None) -> str:
    now = _now_s()
    payload = {
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + settings.access_token_ttl_seconds,
        "sub": sub,
        "role": role,
        "email": email,
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


@dataclass(frozen=True)
class Principal:
    """Immutable per-request snapshot of the signed-in user."""

    sub: str
    role: Role
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def decode_bearer_token(token: str) -> Principal:
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )
    role = payload.get("role", "user")
    if role not in ROLES:
        role = "user"
    return Principal(sub=str(payload["sub"]), role=role, email=str(payload.get("email") or ""))

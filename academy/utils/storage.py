"""
Local-disk object storage with two buckets.

`avatars` objects are public. `payment_slips` objects are only reachable through
short-lived HMAC-signed URLs.
"""
import hashlib
import hmac
import logging
import re
import time
from pathlib import Path
from urllib.parse import urlencode

from academy.core.config import settings
from academy.core.errors import NotFound, StorageError

logger = logging.getLogger(__name__)

AVATARS = "avatars"
PAYMENT_SLIPS = "payment_slips"
BUCKETS = (AVATARS, PAYMENT_SLIPS)
PUBLIC_BUCKETS = (AVATARS,)


def build_object_key(owner_id: str, filename: str | None) -> str:
    """`<owner>/<epoch millis>.<ext>`, the extension taken from the uploaded filename."""
    ext = ""
    if filename and "." in filename:
        ext = re.sub(r"[^a-z0-9]", "", filename.rsplit(".", 1)[-1].lower())
    stamp = int(time.time() * 1000)
    return f"{owner_id}/{stamp}.{ext}" if ext else f"{owner_id}/{stamp}"


def _sign(bucket: str, key: str, expires: int) -> str:
    payload = f"{bucket}:{key}:{expires}".encode("utf-8")
    return hmac.new(settings.jwt_secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


class ObjectStorage:
    def __init__(self, root: str | Path, base_url: str = "") -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path(self, bucket: str, key: str) -> Path:
        if bucket not in BUCKETS:
            raise NotFound("Unknown bucket")
        parts = [p for p in key.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise NotFound("Invalid object key")
        return self.root.joinpath(bucket, *parts)

    def upload(self, bucket: str, key: str, data: bytes, *, upsert: bool = False) -> str:
        path = self._path(bucket, key)
        if path.exists() and not upsert:
            raise StorageError("Object already exists")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error("Upload failed bucket=%s key=%s: %s", bucket, key, e)
            raise StorageError() from e
        return key

    def delete(self, bucket: str, key: str) -> bool:
        path = self._path(bucket, key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False

    def exists(self, bucket: str, key: str) -> bool:
        return self._path(bucket, key).is_file()

    def open_path(self, bucket: str, key: str) -> Path:
        path = self._path(bucket, key)
        if not path.is_file():
            raise NotFound("Object not found")
        return path

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/storage/{bucket}/{key}"

    def create_signed_url(self, bucket: str, key: str, expires_in: int | None = None) -> str:
        ttl = settings.signed_url_ttl_seconds if expires_in is None else expires_in
        expires = int(time.time()) + ttl
        query = urlencode({"expires": expires, "signature": _sign(bucket, key, expires)})
        return f"{self.public_url(bucket, key)}?{query}"

    def verify_signature(self, bucket: str, key: str, expires: int, signature: str) -> bool:
        if time.time() > expires:
            return False
        return hmac.compare_digest(_sign(bucket, key, expires), signature or "")


def get_object_storage() -> ObjectStorage:
    return ObjectStorage(settings.storage_root, settings.public_base_url)

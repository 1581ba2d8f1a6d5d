from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse

from academy.core.deps import get_storage
from academy.utils.storage import PUBLIC_BUCKETS, ObjectStorage


router = APIRouter(prefix="/storage")


@router.get("/{bucket}/{key:path}")
def serve_object(
    bucket: str,
    key: str,
    expires: int | None = Query(default=None),
    signature: str | None = Query(default=None),
    storage: ObjectStorage = Depends(get_storage),
) -> FileResponse:
    """Avatars are public; every other bucket needs a valid, unexpired signed URL."""
    if bucket not in PUBLIC_BUCKETS:
        if expires is None or not signature or not storage.verify_signature(bucket, key, expires, signature):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired link")
    return FileResponse(storage.open_path(bucket, key))

"""
Upload route for manually supplied images and videos.
"""
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session
from typing import List, Literal

from ..config import get_settings
from ..database import get_db
from ..dependencies import get_storage_service
from ..limiter import limiter
from ..logging_config import storage_logger
from ..models.enums import AssetSource, AssetType
from ..responses import bad_request, success
from ..services import asset_service, post_service
from ..services.storage import StorageService

router = APIRouter(prefix="/api/upload", tags=["upload"])
settings = get_settings()


def _validate(upload: UploadFile, content: bytes, media_type: str) -> AssetType:
    """Check MIME prefix and size; return the asset type the file becomes."""
    mime = upload.content_type or ""
    is_image = mime.startswith("image/")
    is_video = mime.startswith("video/")

    if media_type == "image" and not is_image:
        bad_request(f"File {upload.filename} is not an image", "INVALID_FILE_TYPE")
    if media_type == "video" and not is_video:
        bad_request(f"File {upload.filename} is not a video", "INVALID_FILE_TYPE")

    max_size = settings.max_image_size if is_image else settings.max_video_size
    if len(content) > max_size:
        bad_request(
            f"File {upload.filename} is too large. Max size: {max_size // (1024 * 1024)}MB",
            "FILE_TOO_LARGE",
        )
    return AssetType.IMG if is_image else AssetType.VID


@router.post("", status_code=201)
@limiter.limit(settings.upload_rate_limit)
def upload_files(
    request: Request,
    files: List[UploadFile] = File(...),
    post_id: str = Form(..., alias="postId"),
    media_type: Literal["image", "video"] = Form(..., alias="type"),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Store files in the manual bucket and record one MANUAL asset per file."""
    post_service.get_post_or_raise(db, post_id)

    # Validate the whole batch before anything touches storage
    validated = []
    for upload in files:
        content = upload.file.read()
        validated.append((upload, content, _validate(upload, content, media_type)))

    current_max = asset_service.max_order(db, post_id)
    next_order = 0 if current_max is None else current_max + 1

    items = []
    for offset, (upload, content, asset_type) in enumerate(validated):
        result = storage.upload_manual_file(
            content,
            upload.filename or "file",
            upload.content_type or "application/octet-stream",
            post_id,
        )
        items.append({
            "url": result.url,
            "type": asset_type,
            "source": AssetSource.MANUAL,
            "order": next_order + offset,
            "file_name": result.file_name,
            "file_size": result.file_size,
            "mime_type": result.mime_type,
        })

    assets = asset_service.create_assets(db, post_id, items)
    storage_logger.info("Upload batch recorded", post_id=post_id, count=len(items), media_type=media_type)

    return success(
        {"assets": [a.to_dict() for a in assets]},
        message=f"{len(items)} file(s) uploaded successfully",
    )

import logging
import re
import uuid
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile, status

from clone_api.adapters.storage import BaseBlobStore
from clone_api.config.settings import Settings
from clone_api.dependencies import get_app_settings, get_blob_store
from clone_api.errors import ValidationError
from clone_api.schemas import (
    DEFAULT_UPLOAD_CONTENT_TYPE,
    DEFAULT_UPLOAD_FILENAME,
    ErrorResponse,
    UploadResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [A-Za-z0-9_.-] with an underscore."""
    return UNSAFE_FILENAME_CHARS.sub("_", filename)


def build_file_key(filename: Optional[str]) -> str:
    return f"u/{uuid.uuid4()}_{sanitize_filename(filename or DEFAULT_UPLOAD_FILENAME)}"


def build_file_url(public_base: str, file_key: str) -> str:
    """Public URL of an uploaded clip; served by the file bot, not by this API."""
    return f"{public_base}/file/{quote(file_key, safe='')}"


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "No `file` field in the form."},
    },
)
async def upload_clip(
    file: Optional[UploadFile] = File(None, description="Audio clip to clone from"),
    settings: Settings = Depends(get_app_settings),
    blob_store: BaseBlobStore = Depends(get_blob_store),
) -> UploadResponse:
    """Store an uploaded audio clip and return its key and public URL."""
    if file is None:
        raise ValidationError("file missing")

    file_key = build_file_key(file.filename)
    content = await file.read()
    await blob_store.put(file_key, content, content_type=file.content_type or DEFAULT_UPLOAD_CONTENT_TYPE)
    await file.close()

    logger.info("Accepted upload %s (%d bytes)", file_key, len(content))
    return UploadResponse(fileKey=file_key, fileUrl=build_file_url(settings.bot_public_base, file_key))

# mcq_practice/services/upload_service.py
import logging
import os
import uuid
from pathlib import Path

from fastapi import UploadFile

from mcq_practice.core.config import settings
from mcq_practice.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

IMAGE_SUBDIR = "images"
MAX_BULK_FILE_SIZE = 2 * 1024 * 1024


def _extension(filename: str | None) -> str:
    return Path(filename or "").suffix.lower().lstrip(".")


def save_question_image(file: UploadFile) -> str:
    """
    Store an uploaded question image and return the path the API serves it
    under, which is what gets saved on ``Question.image_path``.
    """
    ext = _extension(file.filename)
    if ext not in settings.ALLOWED_IMAGE_EXTENSIONS:
        allowed = ", ".join(sorted(settings.ALLOWED_IMAGE_EXTENSIONS))
        raise ValidationError(f"Unsupported image type. Allowed: {allowed}")

    data = file.file.read(settings.MAX_IMAGE_SIZE + 1)
    if len(data) > settings.MAX_IMAGE_SIZE:
        raise ValidationError(
            f"Image is larger than {settings.MAX_IMAGE_SIZE // (1024 * 1024)}MB"
        )
    if not data:
        raise ValidationError("Uploaded image is empty")

    target_dir = Path(settings.UPLOAD_DIR) / IMAGE_SUBDIR
    os.makedirs(target_dir, exist_ok=True)
    name = f"{uuid.uuid4().hex}.{ext}"
    (target_dir / name).write_bytes(data)

    logger.info(f"Stored question image {name} ({len(data)} bytes)")
    return f"/uploads/{IMAGE_SUBDIR}/{name}"


def read_text_upload(file: UploadFile) -> str:
    """Read a bulk-question text file."""
    data = file.file.read(MAX_BULK_FILE_SIZE + 1)
    if len(data) > MAX_BULK_FILE_SIZE:
        raise ValidationError("File is too large")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("File must be UTF-8 encoded text") from e

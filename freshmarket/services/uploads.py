import logging
import os
import shutil
import uuid
from pathlib import Path

from fastapi import UploadFile

from freshmarket.core.errors import ValidationError

log = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
UPLOAD_URL_PREFIX = "/uploads"


class UploadStore:
    """Writes uploaded images under one directory served at /uploads."""

    def __init__(self, root: str):
        self.root = Path(root)

    def ensure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def save(self, upload: UploadFile, *, folder: str, field: str) -> str:
        """Persist the file and return its public URL path."""
        file_extension = os.path.splitext(upload.filename or "")[1].lower()
        if file_extension not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                f"Validation error: {field}: invalid file type. Allowed types: JPG, JPEG, PNG, GIF, WEBP",
                field=field,
            )

        target_dir = self.root / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        safe_filename = f"{uuid.uuid4().hex}{file_extension}"
        file_location = target_dir / safe_filename
        with open(file_location, "wb") as buffer:
            shutil.copyfileobj(upload.file, buffer)

        log.info("Stored upload %s as %s", upload.filename, file_location)
        return f"{UPLOAD_URL_PREFIX}/{folder}/{safe_filename}"

    def discard(self, url: str) -> None:
        """Best-effort removal of a stored file by its public URL path."""
        if not url or not url.startswith(UPLOAD_URL_PREFIX + "/"):
            return
        image_path = self.root / url[len(UPLOAD_URL_PREFIX) + 1:]
        try:
            if image_path.exists():
                image_path.unlink()
        except OSError as e:
            # the row change already succeeded; a stray file is not an error for the caller
            log.warning("Error deleting upload %s: %s", image_path, e)

from dataclasses import dataclass
from typing import List, Optional

from fastapi import UploadFile

from image_service.config import Settings
from image_service.exceptions import MissingFileError, ValidationError


@dataclass(frozen=True)
class UploadedFile:
    content: bytes
    original_filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


async def read_upload(files: Optional[List[UploadFile]], settings: Settings) -> UploadedFile:
    """Apply the admission rules to the multipart ``image`` field.

    Accepts at most one file whose declared MIME type is allow-listed and
    whose payload fits within ``settings.max_upload_size``. Raises
    ``ValidationError`` otherwise, before anything is stored.
    """
    files = [f for f in files or [] if f.filename]
    if not files:
        raise MissingFileError()
    if len(files) > 1:
        raise ValidationError("Too many files, only one image is allowed per request")

    file = files[0]
    if file.content_type not in settings.allowed_mime_types:
        raise ValidationError("Invalid file type, only JPEG, PNG, and GIF are allowed.")

    # Never buffer more than one byte past the limit
    contents = await file.read(settings.max_upload_size + 1)
    if len(contents) > settings.max_upload_size:
        raise ValidationError(
            f"File too large, maximum size is {settings.max_upload_size} bytes"
        )

    return UploadedFile(
        content=contents,
        original_filename=file.filename,
        content_type=file.content_type,
    )


def parse_user_id(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        raise ValidationError("userId is required")
    try:
        user_id = int(raw)
    except ValueError:
        raise ValidationError("userId must be an integer")
    if user_id <= 0:
        raise ValidationError("userId must be a positive integer")
    return user_id

"""File upload validation utilities.

Sizes are checked by seeking the spooled upload before anything is read
into memory.
"""

import logging
import os
from typing import Optional

from starlette.datastructures import UploadFile

from medtools.api.presenters import format_file_size
from medtools.pipeline.core.exceptions import PayloadTooLargeError, ValidationError
from medtools.services.inputs import Upload

logger = logging.getLogger(__name__)


def _get_file_size(file: UploadFile) -> int:
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


async def read_upload(
    file: Optional[UploadFile],
    *,
    field: str,
    max_bytes: int,
    too_large_message: str,
) -> Optional[Upload]:
    """Validate an optional upload and read it into memory.

    Returns:
        The upload, or None when no file was sent

    Raises:
        ValidationError: If the file is empty
        PayloadTooLargeError: If the file exceeds ``max_bytes``
    """
    if file is None or not file.filename:
        return None

    size = _get_file_size(file)
    if size == 0:
        raise ValidationError(
            message="The uploaded file is empty.",
            field=field,
            details={"file_size": 0},
        )
    if size > max_bytes:
        raise PayloadTooLargeError(too_large_message, max_bytes=max_bytes, actual_bytes=size)

    data = await file.read()
    logger.info(
        "File received: name=%s size=%s content_type=%s",
        file.filename,
        format_file_size(size),
        file.content_type,
    )
    return Upload(
        filename=file.filename,
        content_type=file.content_type or "application/octet-stream",
        data=data,
    )

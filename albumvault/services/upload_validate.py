from typing import Iterable

from fastapi import UploadFile

from albumvault.core.errors import InvalidRequest, PayloadTooLarge
from albumvault.services.ingestion import IncomingFile


async def validate_and_read_upload(
    file: UploadFile,
    allowed_types: Iterable[str],
    max_bytes: int,
) -> IncomingFile:
    """Check the declared type and size of one multipart file and read it."""
    content_type = (file.content_type or "").lower()
    if content_type not in set(allowed_types):
        raise InvalidRequest("Only image files are allowed")

    # Read one byte past the limit so oversized bodies are not loaded whole
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise PayloadTooLarge(f"File too large: {file.filename}")

    return IncomingFile(filename=file.filename or "upload", content_type=content_type, data=content)

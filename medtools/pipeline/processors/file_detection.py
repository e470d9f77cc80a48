"""
File type detection using magic bytes.

Magic bytes reference:
- PDF:  %PDF
- JPEG: 0xFFD8FF
- PNG:  0x89504E47 (89 P N G)
- GIF:  GIF87a / GIF89a
- WEBP: RIFF....WEBP
- DOCX: PK zip container (confirmed by extension)
"""

from pathlib import PurePath
from typing import Final, Literal, Optional

FileType = Literal["pdf", "jpeg", "png", "gif", "webp", "docx", "text"]

IMAGE_TYPES: Final = frozenset({"jpeg", "png", "gif", "webp"})

MIME_TYPES: Final[dict[str, str]] = {
    "pdf": "application/pdf",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text": "text/plain",
}

TEXT_EXTENSIONS: Final = frozenset({".txt", ".md", ".markdown", ".csv", ".json", ".xml"})

_MAGIC_BYTES: Final[dict[bytes, FileType]] = {
    b"%PDF": "pdf",
    b"\xff\xd8\xff": "jpeg",
    b"\x89PNG": "png",
    b"GIF87a": "gif",
    b"GIF89a": "gif",
}


def detect_file_type(data: bytes, filename: Optional[str] = None) -> Optional[FileType]:
    """Detect a supported file type from content, falling back to the extension for text.

    Example:
        >>> detect_file_type(b"%PDF-1.4 ...")
        'pdf'
    """
    header = data[:12]
    for signature, file_type in _MAGIC_BYTES.items():
        if header.startswith(signature):
            return file_type
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return "webp"

    suffix = PurePath(filename or "").suffix.lower()
    if header[:2] == b"PK" and suffix == ".docx":
        return "docx"
    if suffix in TEXT_EXTENSIONS:
        return "text"
    return None

"""Input checks shared by the tool services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from medtools.pipeline.core.exceptions import ValidationError
from medtools.pipeline.processors.file_detection import MIME_TYPES, FileType, detect_file_type
from medtools.pipeline.tools.registry import ToolSpec


@dataclass
class Upload:
    """An uploaded file read into memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def detect(self) -> Optional[FileType]:
        return detect_file_type(self.data, self.filename)

    def mime_type(self) -> str:
        file_type = self.detect()
        return MIME_TYPES[file_type] if file_type else self.content_type


def require_text(
    tool: ToolSpec,
    value: Optional[str],
    *,
    allow_empty: bool = False,
    extra_length: int = 0,
) -> str:
    """Trim the tool's main text input and enforce its limits.

    Args:
        tool: Tool whose messages and limits apply
        value: Raw input value
        allow_empty: Accept an empty value (an image carries the input)
        extra_length: Characters of attached file text counted toward the limit
    """
    text = (value or "").strip()
    if len(text) + extra_length > tool.max_chars:
        raise ValidationError(message=tool.too_long_message, field=tool.input_field)
    if not text and not allow_empty:
        raise ValidationError(message=tool.empty_message, field=tool.input_field)
    return text

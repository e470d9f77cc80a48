"""
Turn uploaded documents into text or images for the model.

Text formats are decoded as UTF-8, PDFs are read with pypdf and Word
documents with python-docx. Images are passed on as data URIs.
"""

from __future__ import annotations

import base64
import io
import logging
from typing import Optional

import docx
from pypdf import PdfReader

from medtools.pipeline.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def decode_text(data: bytes) -> str:
    """Decode a text upload, dropping a BOM and normalising newlines."""
    text = data.decode("utf-8-sig", errors="replace")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def pdf_text(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        logger.warning("PDF text extraction failed", exc_info=True)
        raise ValidationError(
            message="Failed to extract text from the PDF file.",
            field="file",
        ) from e
    return "\n".join(p.strip() for p in pages if p.strip())


def docx_text(data: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as e:
        logger.warning("DOCX text extraction failed", exc_info=True)
        raise ValidationError(
            message="Failed to extract text from the Word document.",
            field="file",
        ) from e
    return "\n".join(p.text for p in document.paragraphs if p.text.strip())


def first_pdf_image(data: bytes) -> Optional[bytes]:
    """Return the bytes of the first image embedded in a PDF, if any."""
    try:
        reader = PdfReader(io.BytesIO(data))
        for page in reader.pages:
            for image in page.images:
                return image.data
    except Exception:
        logger.warning("Failed to read images from PDF", exc_info=True)
    return None


def image_data_uri(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"

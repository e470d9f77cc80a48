"""Vision-model OCR with a short text summary."""

from __future__ import annotations

import logging
from typing import Any, Optional

from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.exceptions import LLMClientError, LLMOutputError, ValidationError
from medtools.pipeline.models.results import OcrSummary
from medtools.pipeline.processors.document_text import first_pdf_image, image_data_uri
from medtools.pipeline.processors.file_detection import IMAGE_TYPES
from medtools.pipeline.processors.image_preprocessor import ImagePreprocessor
from medtools.pipeline.processors.llm_response import strip_markdown_fence
from medtools.pipeline.processors.schema_validator import parse_and_validate
from medtools.pipeline.runner import ToolContext, build_messages, complete
from medtools.pipeline.tools import prompts
from medtools.services.inputs import Upload

logger = logging.getLogger(__name__)

NO_FILE_MESSAGE = "Please upload an image file."
INVALID_TYPE_MESSAGE = "Invalid file type. Please upload a JPEG, PNG, GIF, WEBP image or a PDF."
NO_PDF_IMAGE_MESSAGE = "Failed to extract images from PDF or PDF contains no images."
PREPROCESS_FAILED_MESSAGE = "Failed to preprocess the image for OCR."

SUMMARY_TEMPERATURE = 0.3
SUMMARY_MAX_TOKENS = 300


def prepare_image(upload: Optional[Upload], preprocessor: Optional[ImagePreprocessor] = None) -> bytes:
    """Validate the upload and return preprocessed PNG bytes.

    Raises:
        ValidationError: Missing, unsupported, image-less PDF or unreadable image
    """
    if upload is None:
        raise ValidationError(message=NO_FILE_MESSAGE, field="image")

    file_type = upload.detect()
    if file_type == "pdf":
        image_bytes = first_pdf_image(upload.data)
        if image_bytes is None:
            raise ValidationError(message=NO_PDF_IMAGE_MESSAGE, field="image")
    elif file_type in IMAGE_TYPES:
        image_bytes = upload.data
    else:
        raise ValidationError(message=INVALID_TYPE_MESSAGE, field="image")

    processed = (preprocessor or ImagePreprocessor()).preprocess(image_bytes)
    if processed is None:
        raise ValidationError(message=PREPROCESS_FAILED_MESSAGE, field="image")
    return processed


async def summarize_text(
    client: LLMClient,
    ctx: ToolContext,
    text: str,
    summary_model: str,
) -> str:
    """Summarize OCR output; failures are logged and yield an empty summary."""
    messages = build_messages(prompts.ocr_summary_prompt(ctx.language), text)
    try:
        raw = await complete(
            client,
            ctx,
            messages,
            model=summary_model,
            temperature=SUMMARY_TEMPERATURE,
            max_tokens=SUMMARY_MAX_TOKENS,
        )
        return parse_and_validate(raw, OcrSummary)["summary"]
    except (LLMClientError, LLMOutputError) as e:
        logger.warning(
            "OCR summary failed, returning text only",
            extra={"tool": ctx.tool.name, "error_code": e.error_code},
        )
        return ""


async def recognize_text(
    client: LLMClient,
    ctx: ToolContext,
    upload: Optional[Upload],
    *,
    summary_model: str,
    with_summary: bool = True,
) -> dict[str, Any]:
    """Run OCR on an uploaded image or the first image of a PDF."""
    png = prepare_image(upload)
    messages = build_messages(
        ctx.tool.prompt_for(ctx.language, ctx.options),
        [{"type": "image_url", "image_url": {"url": image_data_uri(png, "image/png")}}],
    )
    text = strip_markdown_fence(await complete(client, ctx, messages))

    result: dict[str, Any] = {"text": text}
    if with_summary:
        result["summary"] = await summarize_text(client, ctx, text, summary_model) if text else ""
    return result

"""Document-oriented tools: SOAP notes, data extraction, paper summaries, experiments."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.exceptions import ValidationError
from medtools.pipeline.processors.document_text import (
    decode_text,
    docx_text,
    image_data_uri,
    pdf_text,
)
from medtools.pipeline.processors.file_detection import IMAGE_TYPES
from medtools.pipeline.processors.image_preprocessor import ImagePreprocessor
from medtools.pipeline.processors.output_formats import normalize_output
from medtools.pipeline.preferences import language_instruction
from medtools.pipeline.runner import ToolContext, build_messages, complete, run_tool
from medtools.pipeline.tools import prompts
from medtools.services.inputs import Upload, require_text

logger = logging.getLogger(__name__)

UNSUPPORTED_FILE_MESSAGE = "Unsupported file type."
TEXT_ONLY_MESSAGE = "Invalid file type. Please upload a .txt or .md file."


def _is_image(upload: Optional[Upload]) -> bool:
    return upload is not None and upload.detect() in IMAGE_TYPES


def document_text(upload: Upload) -> str:
    """Extract the text of a text, PDF or Word upload."""
    file_type = upload.detect()
    if file_type == "text":
        return decode_text(upload.data).strip()
    if file_type == "pdf":
        return pdf_text(upload.data)
    if file_type == "docx":
        return docx_text(upload.data)
    raise ValidationError(
        message=UNSUPPORTED_FILE_MESSAGE,
        field="file",
        details={"content_type": upload.content_type, "filename": upload.filename},
    )


def text_file_content(upload: Upload) -> str:
    if upload.detect() != "text":
        raise ValidationError(message=TEXT_ONLY_MESSAGE, field="file")
    return decode_text(upload.data).strip()


def _image_part(upload: Upload, preprocess: bool = False) -> dict[str, Any]:
    data, mime_type = upload.data, upload.mime_type()
    if preprocess:
        processed = ImagePreprocessor().preprocess(upload.data)
        if processed is not None:
            data, mime_type = processed, "image/png"
    return {"type": "image_url", "image_url": {"url": image_data_uri(data, mime_type)}}


async def generate_soap_note(
    client: LLMClient,
    ctx: ToolContext,
    content: Optional[str],
    upload: Optional[Upload],
) -> dict[str, Any]:
    """Convert a transcript (typed, text file or photographed page) to a SOAP note."""
    tool = ctx.tool
    if _is_image(upload):
        user_content: Any = [
            {
                "type": "text",
                "text": "PLEASE ANALYZE THIS MEDICAL TRANSCRIPT IMAGE AND CONVERT IT TO SOAP FORMAT.",
            },
            _image_part(upload, preprocess=True),
        ]
    else:
        if upload is not None:
            content = text_file_content(upload)
        user_content = require_text(tool, content)

    note = await run_tool(client, ctx, user_content)
    return {"soap_note": note}


async def extract_structured_data(
    client: LLMClient,
    ctx: ToolContext,
    data: Optional[str],
    upload: Optional[Upload],
) -> dict[str, Any]:
    """Extract structured data in the requested output format."""
    tool = ctx.tool
    output_format = ctx.options["output_format"]
    is_image = _is_image(upload)

    file_content = ""
    if upload is not None and not is_image:
        file_content = document_text(upload)

    text = require_text(tool, data, allow_empty=is_image, extra_length=len(file_content))
    system_prompt = prompts.data_extraction_prompt(output_format, is_image, bool(file_content))

    if is_image:
        user_content: Any = [_image_part(upload)]
    else:
        combined = text + (f"\n\nFile content:\n{file_content}" if file_content else "")
        user_content = "Extract structured data from: " + combined

    raw = await complete(client, ctx, build_messages(system_prompt, user_content))
    return {"result": normalize_output(raw, output_format), "format": output_format}


async def summarize_paper(
    client: LLMClient,
    ctx: ToolContext,
    content: Optional[str],
    upload: Optional[Upload],
) -> dict[str, Any]:
    """Summarize a research paper with the selected prompt template."""
    if upload is not None:
        content = text_file_content(upload)
    text = require_text(ctx.tool, content)
    summary = await run_tool(client, ctx, text)
    return {"summary": summary}


async def run_experiment(
    client: LLMClient,
    ctx: ToolContext,
    prompt: Optional[str],
    upload: Optional[Upload],
    library: Mapping[str, str],
) -> dict[str, Any]:
    """Run a free-form or library prompt, optionally with an attached document or image.

    An empty prompt falls back to the selected library prompt.
    """
    tool = ctx.tool
    is_image = _is_image(upload)
    if not (prompt or "").strip():
        prompt = library.get(ctx.options.get("prompt_type", ""), "")

    file_content = ""
    if upload is not None and not is_image:
        file_content = document_text(upload)

    text = require_text(tool, prompt, allow_empty=is_image, extra_length=len(file_content))
    messages = build_messages(language_instruction(ctx.language), text + file_content)
    if is_image:
        messages.append({"role": "user", "content": [_image_part(upload)]})

    raw = await complete(client, ctx, messages)
    return {"result": raw.strip()}

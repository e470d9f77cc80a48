"""Model catalog built from the endpoint's ``/models`` listing."""

from __future__ import annotations

import logging
import re
from typing import Mapping

from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.exceptions import LLMClientError

logger = logging.getLogger(__name__)


def model_label(model_id: str) -> str:
    """Human label for a model id, e.g. ``qwen2.5:1.5b`` -> ``Qwen2.5 1.5b``."""
    label = model_id[:1].upper() + model_id[1:]
    label = label.replace(":", " ")
    lowered = model_id.lower()
    if "vision" in lowered or "vl" in lowered:
        label += " (Vision)"
    return label


def build_catalog(model_ids: list[str], filter_regex: str) -> dict[str, str]:
    pattern = re.compile(filter_regex) if filter_regex else None
    selected = [m for m in model_ids if pattern is None or pattern.search(m)]
    return {model_id: model_label(model_id) for model_id in sorted(set(selected))}


async def fetch_model_catalog(
    client: LLMClient,
    filter_regex: str,
    fallback: Mapping[str, str],
) -> dict[str, str]:
    """Return id -> label for the available models.

    A failing listing, or one with no matching model, yields ``fallback``.
    """
    try:
        model_ids = await client.list_models()
    except LLMClientError as e:
        logger.warning(
            "Model listing failed, using fallback catalog",
            extra={"error_code": e.error_code, "service": "LLM"},
        )
        return dict(fallback)

    catalog = build_catalog(model_ids, filter_regex)
    if not catalog:
        logger.info("No listed model matches the filter, using fallback catalog")
        return dict(fallback)
    return catalog

"""File-based prompt library for the experiment tool.

Each ``.txt``, ``.md`` or ``.xml`` file in the prompts directory is one
prompt; its stem is the key and the title-cased stem is the label.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

PROMPT_EXTENSIONS = (".txt", ".md", ".xml")


def prompt_label(stem: str) -> str:
    return stem.replace("_", " ").replace("-", " ").title()


def load_prompts(directory: Path) -> dict[str, str]:
    """Return key -> prompt text, sorted by key. Missing directory yields {}."""
    if not directory.is_dir():
        logger.warning(f"Prompt directory not found: {directory}")
        return {}

    prompts = {}
    for path in sorted(directory.iterdir()):
        if path.is_file() and path.suffix.lower() in PROMPT_EXTENSIONS:
            text = path.read_text(encoding="utf-8").strip()
            if text:
                prompts[path.stem] = text
    return prompts


def prompt_labels(prompts: dict[str, str]) -> dict[str, str]:
    return {key: prompt_label(key) for key in prompts}

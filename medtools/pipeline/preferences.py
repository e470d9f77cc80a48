"""Per-request preference resolution (model, language and tool options).

A preference is taken from the request, then the preference cookie, then
the configured default. A value outside the allowed set silently falls
back to the hard default.
"""

from __future__ import annotations

from collections.abc import Container
from dataclasses import dataclass
from typing import Optional

from medtools.pipeline.core.config import COOKIE_MAX_AGE_SECONDS, COOKIE_PATH

LANGUAGES = {
    "ro": "Română",
    "en": "English",
    "es": "Español",
    "fr": "Français",
    "de": "Deutsch",
    "it": "Italiano",
}

LANGUAGE_INSTRUCTIONS = {
    "ro": "Respond in Romanian.",
    "en": "Respond in English.",
    "es": "Responde en español.",
    "fr": "Répondez en français.",
    "de": "Antworte auf Deutsch.",
    "it": "Rispondi in italiano.",
}


def language_instruction(language: str) -> str:
    return LANGUAGE_INSTRUCTIONS.get(language, LANGUAGE_INSTRUCTIONS["en"])


def resolve_preference(
    request_value: Optional[str],
    cookie_value: Optional[str],
    default: Optional[str],
    allowed: Container[str],
    hard_default: str,
) -> str:
    """Pick request -> cookie -> default, then validate against ``allowed``."""
    for candidate in (request_value, cookie_value, default):
        if candidate:
            return candidate if candidate in allowed else hard_default
    return hard_default


def cookie_name(prefix: str, preference: str) -> str:
    return f"{prefix}-{preference}"


@dataclass(frozen=True)
class PreferenceCookie:
    name: str
    value: str
    max_age: int = COOKIE_MAX_AGE_SECONDS
    path: str = COOKIE_PATH

"""Multi-turn medical chat with a bounded history."""

from __future__ import annotations

from typing import Any, Optional

from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.config import CHAT_HISTORY_LENGTH
from medtools.pipeline.core.exceptions import ValidationError
from medtools.pipeline.runner import ToolContext, complete
from medtools.pipeline.tools import prompts
from medtools.services.inputs import require_text

_ROLES = {"user", "assistant"}


def normalize_history(history: Any) -> list[dict[str, str]]:
    """Validate client-sent history and keep the most recent exchanges."""
    if history in (None, ""):
        return []
    if not isinstance(history, list):
        raise ValidationError(message="Chat history must be a list of messages.", field="history")

    messages = []
    for item in history:
        if (
            not isinstance(item, dict)
            or item.get("role") not in _ROLES
            or not isinstance(item.get("content"), str)
        ):
            raise ValidationError(message="Invalid chat history entry.", field="history")
        messages.append({"role": item["role"], "content": item["content"]})

    limit = CHAT_HISTORY_LENGTH * 2
    return messages[-limit:] if len(messages) > limit else messages


async def chat_reply(
    client: LLMClient,
    ctx: ToolContext,
    message: Optional[str],
    history: Any = None,
) -> dict[str, Any]:
    """Answer ``message`` in the context of ``history``.

    Returns:
        The reply plus the updated history, which the client sends back next turn
    """
    text = require_text(ctx.tool, message)
    messages = normalize_history(history)
    messages.append({"role": "user", "content": text})

    personality = ctx.options["personality"]
    system = {"role": "system", "content": prompts.chat_prompt(personality, ctx.language)}
    reply = (await complete(client, ctx, [system, *messages])).strip()
    messages.append({"role": "assistant", "content": reply})

    return {
        "reply": reply,
        "history": messages,
        "model": ctx.model,
        "language": ctx.language,
        "personality": personality,
    }

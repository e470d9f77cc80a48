"""Generic tool runner: prompt building, completion and result extraction."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.preferences import (
    LANGUAGES,
    PreferenceCookie,
    cookie_name,
    resolve_preference,
)
from medtools.pipeline.processors.llm_response import strip_markdown_fence
from medtools.pipeline.processors.schema_validator import parse_and_validate
from medtools.pipeline.tools.registry import ToolSpec

logger = logging.getLogger(__name__)

MessageContent = Union[str, list[dict[str, Any]]]


@dataclass
class ToolContext:
    """Preferences resolved for one request."""

    tool: ToolSpec
    model: str
    language: str
    options: dict[str, str] = field(default_factory=dict)
    models: dict[str, str] = field(default_factory=dict)
    option_choices: dict[str, Mapping[str, str]] = field(default_factory=dict)

    def cookies(self) -> list[PreferenceCookie]:
        prefix = self.tool.cookies
        cookies = [
            PreferenceCookie(cookie_name(prefix, "model"), self.model),
            PreferenceCookie(cookie_name(prefix, "language"), self.language),
        ]
        for option in self.tool.options:
            cookies.append(PreferenceCookie(cookie_name(prefix, option.cookie), self.options[option.name]))
        return cookies


def resolve_context(
    tool: ToolSpec,
    values: Mapping[str, str],
    cookies: Mapping[str, str],
    models: Mapping[str, str],
    default_model: str,
    option_choices: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> ToolContext:
    """Resolve model, language and tool options for a request.

    Args:
        tool: Tool being invoked
        values: Request parameters (query string and form fields)
        cookies: Request cookies
        models: Available model catalog (id -> label)
        default_model: Configured default model for this tool
        option_choices: Runtime choices overriding a tool option's static ones
    """
    prefix = tool.cookies
    model = resolve_preference(
        values.get("model"),
        cookies.get(cookie_name(prefix, "model")),
        default_model,
        models,
        tool.hard_default_model,
    )
    language = resolve_preference(
        values.get("language"),
        cookies.get(cookie_name(prefix, "language")),
        tool.default_language,
        LANGUAGES,
        tool.default_language,
    )

    choices_by_option = {option.name: option.choices for option in tool.options}
    choices_by_option.update(option_choices or {})
    options = {}
    for option in tool.options:
        choices = choices_by_option[option.name]
        default = option.default if option.default in choices else next(iter(choices), option.default)
        options[option.name] = resolve_preference(
            values.get(option.name),
            cookies.get(cookie_name(prefix, option.cookie)),
            default,
            choices,
            default,
        )

    return ToolContext(
        tool=tool,
        model=model,
        language=language,
        options=options,
        models=dict(models),
        option_choices=choices_by_option,
    )


def build_messages(
    system_prompt: str,
    user_content: MessageContent,
    user_prefix: str = "",
) -> list[dict[str, Any]]:
    if isinstance(user_content, str):
        user_content = user_prefix + user_content
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]


async def complete(
    client: LLMClient,
    ctx: ToolContext,
    messages: list[dict[str, Any]],
    *,
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> str:
    tool = ctx.tool
    return await client.chat(
        messages,
        model=model or ctx.model,
        temperature=temperature if temperature is not None else tool.temperature,
        max_tokens=max_tokens if max_tokens is not None else tool.max_tokens,
    )


async def run_tool(
    client: LLMClient,
    ctx: ToolContext,
    user_content: MessageContent,
    *,
    system_prompt: Optional[str] = None,
) -> dict[str, Any]:
    """Run one tool invocation end to end.

    Schema tools return the validated result. Plain-text tools return
    ``{response_key: text}`` with any wrapping code fence removed.

    Raises:
        LLMClientError: Transport failure
        LLMOutputError: Reply did not match the tool schema
    """
    tool = ctx.tool
    started = time.perf_counter()
    messages = build_messages(
        system_prompt or tool.prompt_for(ctx.language, ctx.options),
        user_content,
        tool.user_prefix,
    )
    raw = await complete(client, ctx, messages)

    schema = tool.schema_for(ctx.options)
    if schema is not None:
        result: dict[str, Any] = parse_and_validate(raw, schema)
    else:
        result = {tool.response_key or "result": strip_markdown_fence(raw)}

    logger.info(
        "Tool completed",
        extra={
            "tool": tool.name,
            "model": ctx.model,
            "language": ctx.language,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    return result

"""Application startup validation checks.

Validates configuration before the application starts serving requests.
"""

import logging
import re

logger = logging.getLogger(__name__)


def validate_all_settings() -> None:
    """Validate critical settings at application startup.

    Raises:
        RuntimeError: If a setting is present but unusable
    """
    from medtools.core.settings import app_settings, llm_settings

    problems = []

    if not re.match(r"^https?://.+", llm_settings.LLM_ENDPOINT):
        problems.append(
            f"  - LLM_ENDPOINT={llm_settings.LLM_ENDPOINT} (must start with http:// or https://)"
        )

    try:
        re.compile(llm_settings.LLM_MODEL_FILTER_REGEX)
    except re.error as e:
        problems.append(f"  - LLM_MODEL_FILTER_REGEX is not a valid regex: {e}")

    if app_settings.LOG_LEVEL.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        problems.append(f"  - LOG_LEVEL={app_settings.LOG_LEVEL} (unknown level)")

    if problems:
        error_msg = "Invalid configuration:\n" + "\n".join(problems)
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    logger.info("Settings validated successfully")
    logger.info(f"  - LLM: {llm_settings.endpoint}")
    logger.info(f"  - Default text model: {llm_settings.LLM_DEFAULT_TEXT_MODEL}")
    logger.info(f"  - Default vision model: {llm_settings.LLM_DEFAULT_VISION_MODEL}")
    if not app_settings.prompts_dir.is_dir():
        logger.warning(f"Prompts directory not found: {app_settings.prompts_dir}")

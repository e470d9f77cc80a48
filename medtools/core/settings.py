"""
Centralized application settings using Pydantic.

All environment variables are read once at startup and validated.
Every value has a safe default so the service starts against a local
Ollama instance without any configuration.
"""

from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class LLMSettings(BaseSettings):
    """Chat-completions endpoint configuration."""

    LLM_ENDPOINT: str = "http://127.0.0.1:11434/v1"
    LLM_API_KEY: SecretStr = SecretStr("")
    LLM_DEFAULT_TEXT_MODEL: str = "qwen2.5:1.5b"
    LLM_DEFAULT_VISION_MODEL: str = "gemma3:4b"
    LLM_MODEL_FILTER_REGEX: str = "free"

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}

    @property
    def endpoint(self) -> str:
        return self.LLM_ENDPOINT.rstrip("/")

    @property
    def api_key(self) -> str:
        return self.LLM_API_KEY.get_secret_value()


class AppSettings(BaseSettings):
    """General application settings."""

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    PROMPTS_DIR: str = ""

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}

    @property
    def prompts_dir(self) -> Path:
        """Resolve the experiment prompts directory."""
        env_dir = self.PROMPTS_DIR.strip()
        if env_dir:
            return Path(env_dir).resolve()
        return Path(__file__).resolve().parents[2] / "prompts"


# Singleton instances - loaded once at module import
llm_settings = LLMSettings()
app_settings = AppSettings()

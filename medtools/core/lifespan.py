import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from medtools.core.settings import llm_settings
from medtools.pipeline.clients.llm_client import LLMClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown tasks."""

    if getattr(app.state, "llm_client", None) is None:
        logger.info(f"Initializing LLM client for {llm_settings.endpoint}...")
        llm_client = LLMClient(llm_settings.endpoint, llm_settings.api_key)
        llm_client.start()
        app.state.llm_client = llm_client
        logger.info("LLM client ready")

    yield

    if getattr(app.state, "llm_client", None) is not None:
        logger.info("Closing LLM client...")
        await app.state.llm_client.aclose()
        app.state.llm_client = None

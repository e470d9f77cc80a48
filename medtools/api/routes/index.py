"""Tool index and model catalog endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from medtools.api.presenters import render_index
from medtools.api.schemas import ModelsResponse, ToolSummary
from medtools.core.dependencies import get_llm_client
from medtools.core.settings import llm_settings
from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.model_catalog import fetch_model_catalog
from medtools.pipeline.tools.registry import TEXT_MODELS, TOOLS

router = APIRouter()


@router.get("/", response_class=HTMLResponse, tags=["tools"])
async def index():
    return HTMLResponse(render_index(TOOLS))


@router.get("/tools", response_model=list[ToolSummary], tags=["tools"])
async def list_tools():
    return [
        ToolSummary(
            name=tool.name,
            title=tool.title,
            description=tool.description,
            path=tool.path,
            methods=["GET", "POST"] if tool.allow_get else ["POST"],
        )
        for tool in TOOLS.values()
    ]


@router.get("/models", response_model=ModelsResponse, tags=["tools"])
async def list_models(client: LLMClient = Depends(get_llm_client)):
    """Models matching the configured filter, or the built-in text models."""
    models = await fetch_model_catalog(client, llm_settings.LLM_MODEL_FILTER_REGEX, TEXT_MODELS)
    return ModelsResponse(
        models=models,
        default_text_model=llm_settings.LLM_DEFAULT_TEXT_MODEL,
        default_vision_model=llm_settings.LLM_DEFAULT_VISION_MODEL,
    )

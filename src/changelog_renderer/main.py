"""FastAPI application exposing the changelog renderer.

Endpoints:
- POST /render - Render releases to Markdown
- GET /health - Health check for load balancers and monitoring

Renderer options are loaded once at startup from the YAML file named by
CHANGELOG_CONFIG; a request may override them with its own "options".

To run locally:
    uvicorn changelog_renderer.main:app --reload --port 8000
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from changelog_renderer.config import load_render_config
from changelog_renderer.logging_config import get_logger, setup_logging
from changelog_renderer.renderer import MarkdownRenderer
from changelog_renderer.schemas import Release, RenderOptions

logger = get_logger(__name__)


class RenderRequest(BaseModel):
    releases: list[Release] = Field(..., description="Releases in display order")
    options: RenderOptions | None = Field(
        None, description="Overrides the server's renderer options"
    )


class RenderResponse(BaseModel):
    markdown: str


# ---------------------------------------------------------------------------
# Application Lifespan (startup/shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    options = load_render_config(os.environ.get("CHANGELOG_CONFIG"))
    app.state.renderer = MarkdownRenderer(options)
    logger.info("renderer_ready", categories=options.categories)
    yield


# ---------------------------------------------------------------------------
# FastAPI App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Changelog Renderer",
    description="Renders Markdown changelogs from categorized releases",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "detail": str(exc)},
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@app.post("/render", response_model=RenderResponse)
async def render(payload: RenderRequest, request: Request) -> RenderResponse:
    """Render the posted releases.

    Args:
        payload: Releases plus optional renderer options
        request: The incoming HTTP request (for accessing app state)

    Returns:
        The rendered Markdown document
    """
    if payload.options is not None:
        renderer = MarkdownRenderer(payload.options)
    else:
        renderer = request.app.state.renderer

    return RenderResponse(markdown=renderer.render_markdown(payload.releases))

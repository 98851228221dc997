"""FastAPI application exposing localctx tools over HTTP."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Literal, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import ConfigError, load_config
from ..config_editor import ConfigEditor
from ..logging import get_logger
from ..models import FetchRequest
from ..orchestrator import Orchestrator

logger = get_logger("service")

T = TypeVar("T")


class FetchContextRequest(BaseModel):
    search_terms: List[str] = Field(min_length=1)
    globs: List[str] = Field(default_factory=list)
    regex: List[str] = Field(default_factory=list)
    reference_depth: Optional[int] = Field(default=None, ge=-1)


class MarkdownResponse(BaseModel):
    markdown: str


class UpdateConfigRequest(BaseModel):
    operation: Literal["get", "set", "delete", "add", "remove"]
    key: Optional[str] = None
    value: Any = None
    array_item: Any = None


class UpdateConfigResponse(BaseModel):
    result: str


class HealthResponse(BaseModel):
    status: str


async def _run_blocking(func: Callable[[], T]) -> T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def create_app(
    orchestrator_factory: Optional[Callable[[], Orchestrator]] = None,
    *,
    config_path: Path | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing localctx operations."""

    def _default_orchestrator() -> Orchestrator:
        return Orchestrator(load_config(config_path))

    factory = orchestrator_factory or _default_orchestrator
    app = FastAPI(title="localctx", version="0.1.0")

    async def get_orchestrator() -> Orchestrator:
        # Re-read configuration per request so config edits apply immediately.
        return factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/fetch-context", response_model=MarkdownResponse)
    async def fetch_context(
        payload: FetchContextRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> MarkdownResponse:
        request = FetchRequest(
            search_terms=list(payload.search_terms),
            globs=list(payload.globs),
            regex=list(payload.regex),
            reference_depth=payload.reference_depth,
        )
        markdown = await _run_blocking(lambda: orchestrator.fetch_context(request))
        return MarkdownResponse(markdown=markdown)

    @app.post("/update-config", response_model=UpdateConfigResponse)
    async def update_config(
        payload: UpdateConfigRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> UpdateConfigResponse:
        editor = ConfigEditor(orchestrator.config.config_path)

        def _apply() -> str:
            return editor.apply(
                payload.operation,
                payload.key,
                value=payload.value,
                array_item=payload.array_item,
            )

        return UpdateConfigResponse(result=await _run_blocking(_apply))

    @app.get("/tools", response_model=MarkdownResponse)
    async def list_tools(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> MarkdownResponse:
        return MarkdownResponse(markdown=orchestrator.tools_reference())

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        logger.warning("Configuration error: %s", exc)
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, *, config_path: Path | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(config_path=config_path)
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]

"""FastAPI application exposing the digest pipeline over HTTP."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from gitdigest import __version__
from gitdigest.core.exceptions import DigestError, FetchError, InvalidInputError
from gitdigest.engine import DigestEngine
from gitdigest.reporting.digest import DigestResult

logger = logging.getLogger(__name__)

PROCESSING_FAILED = "Processing failed"
FETCH_FAILED = "Failed to fetch repository"


class ProcessRequest(BaseModel):
    url: str
    options: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str


def _default_engine() -> DigestEngine:
    return DigestEngine()


def create_app(
    engine_factory: Callable[[], DigestEngine] = _default_engine,
) -> FastAPI:
    """Create the FastAPI application."""

    app = FastAPI(title="gitdigest", version=__version__)

    async def get_engine() -> DigestEngine:
        return engine_factory()

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/api/process-repo")
    async def process_repo(
        payload: ProcessRequest,
        engine: DigestEngine = Depends(get_engine),
    ) -> JSONResponse:
        body = {"url": payload.url, "options": payload.options or {}}

        def _run() -> DigestResult:
            return engine.process_request(body)

        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, _run)
        except InvalidInputError as e:
            logger.info(f"Rejected request: {e}")
            return JSONResponse(status_code=400, content={"error": str(e.args[0])})
        except FetchError as e:
            logger.error(f"Fetch failed: {e} {e.details.get('stderr', '')}")
            return JSONResponse(status_code=500, content={"error": FETCH_FAILED})
        except DigestError as e:
            logger.error(f"Processing failed: {e}")
            return JSONResponse(status_code=500, content={"error": PROCESSING_FAILED})

        return JSONResponse(status_code=200, content=result.to_dict())

    return app

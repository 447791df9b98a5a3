from __future__ import annotations

import re
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from .. import __version__
from ..collaborators import BlobStore, DatasetStore, InMemoryBlobStore, InMemoryDatasetStore
from ..config import InsightsConfig, get_config
from ..errors import InsightsError
from .error_handler import insights_error_handler, request_validation_handler
from .routes import router

_REQUEST_ID = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


def _request_id(request: Request) -> str:
    supplied = request.headers.get("X-Request-ID", "")
    if _REQUEST_ID.match(supplied):
        return supplied
    return f"req_{uuid.uuid4().hex[:12]}"


def create_app(
    config: Optional[InsightsConfig] = None,
    datasets: Optional[DatasetStore] = None,
    blobs: Optional[BlobStore] = None,
) -> FastAPI:
    """Build the HTTP app around the given (or in-memory) collaborators."""
    app = FastAPI(
        title="datasight",
        version=__version__,
        docs_url="/docs",
    )
    app.state.config = config or get_config()
    app.state.datasets = datasets if datasets is not None else InMemoryDatasetStore()
    app.state.blobs = blobs if blobs is not None else InMemoryBlobStore()

    # Exception handlers
    app.add_exception_handler(InsightsError, insights_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.middleware("http")
    async def attach_request_id(request: Request, call_next):
        request_id = _request_id(request)
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.include_router(router)
    return app

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from ..analyze.orchestrator import InsightsOrchestrator
from ..analyze.provider_factory import ProviderFactory
from ..collaborators import AuthBackend, BlobStore, DatasetStore
from ..config import InsightsConfig
from ..logging import InsightsLogger
from ..models import User


class HeaderAuth:
    """
    Development auth backend: trusts the ``X-User-Id`` header.

    Deployments override ``get_auth`` with a backend that verifies a session.
    """

    def __init__(self, user_id: Optional[str]) -> None:
        self.user_id = (user_id or "").strip()

    async def get_current_user(self) -> Optional[User]:
        if not self.user_id:
            return None
        return User(id=self.user_id)


def get_config(request: Request) -> InsightsConfig:
    return request.app.state.config


def get_dataset_store(request: Request) -> DatasetStore:
    return request.app.state.datasets


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blobs


def get_auth(request: Request) -> AuthBackend:
    return HeaderAuth(request.headers.get("X-User-Id"))


def get_factory(config: InsightsConfig = Depends(get_config)) -> ProviderFactory:
    return ProviderFactory(config)


def get_orchestrator(
    request: Request,
    config: InsightsConfig = Depends(get_config),
    auth: AuthBackend = Depends(get_auth),
    datasets: DatasetStore = Depends(get_dataset_store),
    blobs: BlobStore = Depends(get_blob_store),
    factory: ProviderFactory = Depends(get_factory),
) -> InsightsOrchestrator:
    request_id = getattr(request.state, "request_id", "unknown")
    return InsightsOrchestrator(
        config=config,
        auth=auth,
        datasets=datasets,
        blobs=blobs,
        factory=factory,
        logger=InsightsLogger(run_id=request_id),
    )

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..analyze.charts import parse_chart_description
from ..analyze.orchestrator import InsightsOrchestrator
from ..analyze.provider_factory import ProviderFactory
from ..collaborators import AuthBackend, DatasetStore
from ..errors import AuthError, NotFoundError, ValidationError
from .dependencies import get_auth, get_dataset_store, get_factory, get_orchestrator
from .schemas import ChartResponse, GenerateInsightsRequest, GenerateInsightsResponse, ProvidersResponse

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/api/v1/generate-insights", response_model=GenerateInsightsResponse)
async def generate_insights(
    body: GenerateInsightsRequest,
    orchestrator: InsightsOrchestrator = Depends(get_orchestrator),
):
    outcome = await orchestrator.generate_insights(body.datasetId, body.providerType)
    return GenerateInsightsResponse(
        datasetId=outcome.dataset_id,
        model=outcome.model,
        tokensUsed=outcome.tokens_used,
        cost=outcome.cost,
    )


@router.get("/api/v1/providers", response_model=ProvidersResponse)
async def list_providers(
    size: Optional[int] = Query(default=None, ge=0, description="Payload size in bytes"),
    factory: ProviderFactory = Depends(get_factory),
):
    return ProvidersResponse(
        available=factory.list_available_providers(),
        default=factory.resolve_type(),
        recommended=factory.recommend_provider(size) if size is not None else None,
    )


@router.get("/api/v1/datasets/{dataset_id}/chart", response_model=ChartResponse)
async def get_chart(
    dataset_id: str,
    auth: AuthBackend = Depends(get_auth),
    datasets: DatasetStore = Depends(get_dataset_store),
):
    user = await auth.get_current_user()
    if user is None:
        raise AuthError("Unauthorized")

    dataset = await datasets.get_dataset(dataset_id, user.id)
    if dataset is None:
        raise NotFoundError("Dataset not found")
    if dataset.template != "bar-chart":
        raise ValidationError(f"Dataset {dataset_id} does not use the bar-chart template")
    if dataset.insights_markdown is None:
        raise NotFoundError("Insights have not been generated for this dataset")

    parsed = parse_chart_description(dataset.insights_markdown)
    return ChartResponse(ok=parsed.ok, chart=parsed.chart, error=parsed.error, raw=parsed.raw)

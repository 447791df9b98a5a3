from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel

from ..analyze.charts import ChartDescription


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None
    request_id: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


class GenerateInsightsRequest(BaseModel):
    datasetId: Optional[str] = None
    providerType: Optional[str] = None


class GenerateInsightsResponse(BaseModel):
    success: bool = True
    datasetId: str
    model: str
    tokensUsed: int
    cost: float


class ProvidersResponse(BaseModel):
    available: List[str]
    default: str
    recommended: Optional[str] = None


class ChartResponse(BaseModel):
    ok: bool
    chart: Optional[ChartDescription] = None
    error: Optional[str] = None
    raw: str

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from .constants import DatasetStatus

TemplateKind = Literal["text-summary", "bar-chart"]
ProviderType = Literal["claude", "deepseek", "groq"]

TEMPLATE_KINDS: tuple[str, ...] = ("text-summary", "bar-chart")
PROVIDER_TYPES: tuple[str, ...] = ("claude", "deepseek", "groq")


@dataclass(frozen=True)
class ProviderConfig:
    api_key: str
    model: Optional[str] = None


@dataclass(frozen=True)
class AnalysisRequest:
    csv_data: str
    file_name: str
    user_prompt: Optional[str] = None
    template: TemplateKind = "text-summary"


@dataclass(frozen=True)
class AnalysisResult:
    """Normalized result of one provider call."""

    insights: str
    tokens_used: int
    cost: float
    model: str
    provider: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0


@dataclass(frozen=True)
class User:
    id: str
    email: Optional[str] = None


@dataclass
class DatasetRecord:
    id: str
    user_id: str
    file_name: str
    storage_path: str
    prompt: Optional[str] = None
    template: TemplateKind = "text-summary"
    insights_status: DatasetStatus = DatasetStatus.PENDING
    insights_markdown: Optional[str] = None
    insights_generated_at: Optional[str] = None
    insights_model: Optional[str] = None
    insights_tokens_used: Optional[int] = None
    insights_cost: Optional[float] = None
    insights_error: Optional[str] = None


@dataclass(frozen=True)
class InsightsOutcome:
    dataset_id: str
    model: str
    tokens_used: int
    cost: float
    status: Literal["completed"] = "completed"

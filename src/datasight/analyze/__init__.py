"""Provider selection, prompt construction and insight orchestration."""

from .charts import ChartDescription, ChartParseResult, ChartPoint, parse_chart_description
from .orchestrator import InsightsOrchestrator
from .pricing import PROVIDER_SPECS, ProviderSpec, estimate_cost
from .provider_factory import ProviderFactory
from .truncation import truncate_rows

__all__ = [
    "ChartDescription",
    "ChartParseResult",
    "ChartPoint",
    "InsightsOrchestrator",
    "PROVIDER_SPECS",
    "ProviderFactory",
    "ProviderSpec",
    "estimate_cost",
    "parse_chart_description",
    "truncate_rows",
]

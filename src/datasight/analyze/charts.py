from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from ..constants import Limits


class ChartPoint(BaseModel):
    name: str
    value: float = Field(strict=True, allow_inf_nan=False)


class ChartDescription(BaseModel):
    """Bar chart emitted by a provider for the ``bar-chart`` template."""

    chartType: Literal["bar"]
    title: str
    xAxisLabel: str
    yAxisLabel: str
    data: List[ChartPoint] = Field(
        min_length=Limits.MIN_CHART_ITEMS,
        max_length=Limits.MAX_CHART_ITEMS,
    )
    insights: str = ""


@dataclass
class ChartParseResult:
    chart: Optional[ChartDescription]
    error: Optional[str]
    raw: str

    @property
    def ok(self) -> bool:
        return self.chart is not None


_FENCE = re.compile(r"^```(?:json)?\s*\n(.*?)\n?```$", re.DOTALL)


def _strip_fence(text: str) -> str:
    stripped = text.strip()
    match = _FENCE.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-standard constant {name}")


def parse_chart_description(text: Optional[str]) -> ChartParseResult:
    """
    Parse stored ``bar-chart`` insights into a ChartDescription.

    Never raises: invalid JSON or a schema mismatch is reported through
    ``error`` with the raw text kept for display.
    """
    raw = text or ""
    content = _strip_fence(raw)
    if not content:
        return ChartParseResult(chart=None, error="Empty chart response", raw=raw)

    try:
        payload = json.loads(content, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        return ChartParseResult(
            chart=None,
            error=f"Failed to parse chart data: invalid JSON ({exc.msg} at line {exc.lineno} column {exc.colno})",
            raw=raw,
        )
    except ValueError as exc:
        return ChartParseResult(chart=None, error=f"Failed to parse chart data: invalid JSON ({exc})", raw=raw)

    if not isinstance(payload, dict):
        return ChartParseResult(chart=None, error="Failed to parse chart data: expected a JSON object", raw=raw)

    try:
        chart = ChartDescription.model_validate(payload)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        )
        return ChartParseResult(chart=None, error=f"Invalid chart data: {problems}", raw=raw)

    return ChartParseResult(chart=chart, error=None, raw=raw)

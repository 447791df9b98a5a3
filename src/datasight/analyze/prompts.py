from __future__ import annotations

from typing import Optional

from ..constants import DEFAULT_CHART_PROMPT, DEFAULT_DATASET_PROMPT, Limits
from ..errors import UnsupportedTemplateError
from ..models import TEMPLATE_KINDS, AnalysisRequest

TEXT_SUMMARY_SYSTEM_PROMPT = """You are a data analysis expert. Analyze the provided CSV data and generate comprehensive insights in markdown format.

Your analysis should include:
1. **Summary** - High-level overview of the data
2. **Key Findings** - 3-5 most important discoveries (bullet points)
3. **Trends & Patterns** - Any notable trends, correlations, or patterns
4. **Statistical Insights** - Relevant statistics (averages, totals, distributions)
5. **Recommendations** - Actionable recommendations based on the data

Format your response in clean, well-structured markdown. Use headers, bullet points, and bold text for emphasis.
Be specific and reference actual data values when possible."""

BAR_CHART_SYSTEM_PROMPT = f"""You are a data visualization expert. Analyze the provided CSV data and design a single bar chart that best answers the user's request.

Respond with exactly one JSON object and nothing else. Do not wrap it in markdown and do not add any prose before or after the JSON.

The JSON object must have these fields:
{{
  "chartType": "bar",
  "title": "string - chart title",
  "xAxisLabel": "string - label for the category axis",
  "yAxisLabel": "string - label for the value axis",
  "data": [{{"name": "string - category", "value": number}}],
  "insights": "string - 2-4 short markdown bullet points explaining the chart"
}}

Rules:
- "data" must contain between {Limits.MIN_CHART_ITEMS} and {Limits.MAX_CHART_ITEMS} items, ordered as they should appear on the chart.
- Every "value" must be a plain number (no units, no quotes, no thousands separators).
- Use values computed from the provided data only."""

_SYSTEM_PROMPTS = {
    "text-summary": TEXT_SUMMARY_SYSTEM_PROMPT,
    "bar-chart": BAR_CHART_SYSTEM_PROMPT,
}

_DEFAULT_PROMPTS = {
    "text-summary": DEFAULT_DATASET_PROMPT,
    "bar-chart": DEFAULT_CHART_PROMPT,
}

_CLOSING_LINES = {
    "text-summary": "Please analyze this data and provide insights based on my request.",
    "bar-chart": "Please return the bar chart JSON for this data based on my request.",
}


def ensure_template(template: str) -> str:
    if template not in TEMPLATE_KINDS:
        raise UnsupportedTemplateError(
            f"Unsupported template: {template}. Must be one of: {', '.join(TEMPLATE_KINDS)}"
        )
    return template


def build_system_prompt(template: str = "text-summary") -> str:
    return _SYSTEM_PROMPTS[ensure_template(template)]


def effective_prompt(user_prompt: Optional[str], template: str = "text-summary") -> str:
    """User-supplied prompt, or the template's default when blank."""
    if user_prompt and user_prompt.strip():
        return user_prompt.strip()
    return _DEFAULT_PROMPTS[ensure_template(template)]


def build_user_message(request: AnalysisRequest) -> str:
    template = ensure_template(request.template)
    return (
        f"File: {request.file_name}\n\n"
        f"User's Request: {effective_prompt(request.user_prompt, template)}\n\n"
        "CSV Data:\n"
        "```csv\n"
        f"{request.csv_data}\n"
        "```\n\n"
        f"{_CLOSING_LINES[template]}"
    )

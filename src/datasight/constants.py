from __future__ import annotations

from enum import Enum


class DatasetStatus(str, Enum):
    """Insight generation status stored on a dataset record."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ExitCode(int, Enum):
    """Process exit codes."""

    SUCCESS = 0
    ERROR = 2


class Limits:
    """Shared hard limits."""

    MAX_ROWS = 100
    MAX_OUTPUT_TOKENS = 4096
    TEMPERATURE = 0.7
    DEFAULT_TIMEOUT_SECONDS = 120
    MIN_CHART_ITEMS = 3
    MAX_CHART_ITEMS = 15

    # Payload size thresholds (bytes) for provider recommendation
    SMALL_PAYLOAD_BYTES = 10_000
    MEDIUM_PAYLOAD_BYTES = 100_000


DEFAULT_DATASET_PROMPT = "Provide a comprehensive analysis of this dataset"
DEFAULT_CHART_PROMPT = "Create a bar chart that highlights the most important comparison in this dataset"
STORAGE_FAILURE_MESSAGE = "Failed to download file from storage"
CANCELLED_MESSAGE = "Insights generation was cancelled"

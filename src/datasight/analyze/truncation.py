from __future__ import annotations

from ..constants import Limits


def truncate_rows(csv_data: str, max_rows: int = Limits.MAX_ROWS) -> str:
    """
    Keep the first ``max_rows`` newline-delimited rows (header included).

    Inputs at or under the limit are returned unchanged. Longer inputs get a
    trailing note with the original row count.
    """
    if max_rows < 1:
        raise ValueError("max_rows must be positive")

    lines = csv_data.split("\n")
    if len(lines) <= max_rows:
        return csv_data

    kept = "\n".join(lines[:max_rows])
    return f"{kept}\n\n[Note: Showing first {max_rows} rows of {len(lines)} total rows]"

from __future__ import annotations

from ..models.conversion_result import RunSummary

"""SUMMARY line rendering.

Format:
SUMMARY rows={rows} sheets={sheets} mismatches={days} mapping_failures={n}
elapsed_sec={elapsed} mode={backend}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}"


def render_summary_line(summary: RunSummary) -> str:
    """Render the SUMMARY line for one conversion run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2026, 1, 12, 9, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2026, 1, 12, 9, 0, 2, tzinfo=timezone.utc)
        >>> s = RunSummary(
        ...     extracted_rows=120, processed_sheets=5, mismatch_days=0, mapping_failures=1,
        ...     backend="vectorized", start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(s)
        'SUMMARY rows=120 sheets=5 mismatches=0 mapping_failures=1 elapsed_sec=2 mode=vectorized'
    """
    return (
        f"SUMMARY rows={summary.extracted_rows} "
        f"sheets={summary.processed_sheets} "
        f"mismatches={summary.mismatch_days} "
        f"mapping_failures={summary.mapping_failures} "
        f"elapsed_sec={_format_seconds(summary.elapsed_seconds)} "
        f"mode={summary.backend}"
    )

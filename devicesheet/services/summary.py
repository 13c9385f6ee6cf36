from __future__ import annotations

from ..models.conversion_result import ConversionResult

"""SUMMARY line rendering for the CLI.

Format::

    SUMMARY direction=<import|export> kind=<kind> file=<name> converted=<n> invalid=<n> elapsed_sec=<s>
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ConversionResult) -> str:
    """Render the SUMMARY line of one conversion.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ConversionResult(
        ...     file_name="devices.xlsx", direction="import", kind="device",
        ...     converted=3, invalid=1, start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY direction=import kind=device file=devices.xlsx converted=3 invalid=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY direction={result.direction} "
        f"kind={result.kind} "
        f"file={result.file_name} "
        f"converted={result.converted} "
        f"invalid={result.invalid} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )

"""
Report formatters for different output formats.

Text output reproduces the tab-separated tables printed by the query
commands; JSON output carries the same data for machine consumption.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from colabnet.core.config import ReportConfig
from colabnet.reporting.report import (
    AuthorFilesReport,
    CousinsReport,
    OwnersReport,
    Report,
)

logger = logging.getLogger(__name__)


class ReportFormatter(ABC):
    """Abstract base class for report formatters."""

    @abstractmethod
    def format(self, report: Report) -> str:
        """Format a report to string."""
        pass

    def save(self, report: Report, path: Path) -> None:
        """Save formatted report to file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.format(report))

        logger.info(f"Report saved to {path}")


class JSONFormatter(ReportFormatter):
    """Formats reports as JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format(self, report: Report) -> str:
        """Format report as a JSON string."""
        return json.dumps(
            report.to_dict(),
            indent=self.indent,
            ensure_ascii=False,
            default=self._json_serializer,
        )

    def _json_serializer(self, obj: Any) -> Any:
        """Custom JSON serializer for non-standard types."""
        if isinstance(obj, datetime):
            return obj.isoformat()
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        return str(obj)


class TextFormatter(ReportFormatter):
    """
    Formats reports as tab-separated tables.

    Empty reports format to an empty string.
    """

    def __init__(self, config: ReportConfig = None):
        self.config = config or ReportConfig()

    def format(self, report: Report) -> str:
        """Format report as text."""
        if report.is_empty:
            return ""

        if isinstance(report, OwnersReport):
            lines = self._format_owners(report)
        elif isinstance(report, CousinsReport):
            lines = self._format_cousins(report)
        elif isinstance(report, AuthorFilesReport):
            lines = self._format_author_files(report)
        else:
            raise TypeError(f"Unsupported report type: {type(report).__name__}")

        return "\n".join(lines)

    def _rule(self) -> str:
        return "=" * self.config.rule_width

    def _format_owners(self, report: OwnersReport) -> List[str]:
        lines = ["CHANGES\tAUTHOR", self._rule()]
        for entry in report.entries:
            lines.append(f"{entry.changes}\t{entry.author}")
        return lines

    def _format_cousins(self, report: CousinsReport) -> List[str]:
        precision = self.config.percent_precision
        width = precision + 4

        lines = [f"TOTAL CHANGES: {report.max_count}", "%\tFILE", self._rule()]
        for entry in report.entries:
            lines.append(f"{entry.percentage:>{width}.{precision}f}\t{entry.file}")
        return lines

    def _format_author_files(self, report: AuthorFilesReport) -> List[str]:
        lines = ["CHANGES\tFILE", self._rule()]
        for entry in report.entries:
            lines.append(f"{entry.changes}\t{entry.file}")
        return lines


def format_report(
    report: Report,
    format_type: str = "text",
    output_path: Optional[Path] = None,
    config: ReportConfig = None,
) -> str:
    """
    Format and optionally save a report.

    Args:
        report: Report to format.
        format_type: Output format ("text", "json").
        output_path: Optional path to save the report.
        config: Optional report configuration for text output.

    Returns:
        Formatted report string.
    """
    if format_type == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter(config)

    formatted = formatter.format(report)

    if output_path:
        formatter.save(report, output_path)

    return formatted

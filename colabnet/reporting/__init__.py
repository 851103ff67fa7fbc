"""
Reporting and output generation module.

Provides report structures for owners and cousins queries and
text/JSON formatters.
"""

from colabnet.reporting.report import (
    Report,
    OwnersReport,
    CousinsReport,
    AuthorFilesReport,
)
from colabnet.reporting.generator import ReportGenerator
from colabnet.reporting.formatter import (
    ReportFormatter,
    JSONFormatter,
    TextFormatter,
    format_report,
)

__all__ = [
    "Report",
    "OwnersReport",
    "CousinsReport",
    "AuthorFilesReport",
    "ReportGenerator",
    "ReportFormatter",
    "JSONFormatter",
    "TextFormatter",
    "format_report",
]

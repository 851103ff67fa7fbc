"""
Report generation from query results.

Turns ascending query results into highest-first reports and computes
cousin percentages relative to the strongest cousin.
"""

import logging
from typing import List, Tuple

from colabnet.reporting.report import (
    AuthorFilesReport,
    CousinEntry,
    CousinsReport,
    FileEntry,
    OwnerEntry,
    OwnersReport,
)

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Builds report objects from QueryEngine results."""

    def owners_report(self, fname: str, owners: List[Tuple[str, int]]) -> OwnersReport:
        """
        Build an owners report.

        Args:
            fname: Queried file.
            owners: ``(author, changes)`` sorted ascending by changes.
        """
        entries = [OwnerEntry(author=author, changes=changes) for author, changes in reversed(owners)]
        return OwnersReport(subject=fname, entries=entries)

    def cousins_report(self, fname: str, cousins: List[Tuple[str, int]]) -> CousinsReport:
        """
        Build a cousins report.

        Each entry's percentage is ``100 * count / max_count``.

        Args:
            fname: Queried file.
            cousins: ``(file, count)`` sorted ascending by count.
        """
        if not cousins:
            return CousinsReport(subject=fname)

        max_count = max(count for _, count in cousins)
        entries = [
            CousinEntry(
                file=other,
                count=count,
                percentage=100.0 * count / max_count if max_count else 0.0,
            )
            for other, count in reversed(cousins)
        ]
        return CousinsReport(subject=fname, max_count=max_count, entries=entries)

    def author_files_report(self, author: str, files: List[Tuple[str, int]]) -> AuthorFilesReport:
        """Build a report of the files an author changed."""
        entries = [FileEntry(file=fname, changes=changes) for fname, changes in reversed(files)]
        return AuthorFilesReport(subject=author, entries=entries)

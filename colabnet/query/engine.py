"""
Query engine over a loaded collaboration database.

Answers "who owns this file" and "which files change with this file".
Results are ordered ascending by weight; reports present them reversed.
"""

import logging
from typing import List, Tuple

from colabnet.storage.database import ColabNetDatabase

logger = logging.getLogger(__name__)


class QueryEngine:
    """
    Ranked lookups against a ColabNetDatabase.

    Unknown names are not errors: they produce empty results.
    """

    def __init__(self, database: ColabNetDatabase):
        self.database = database

    def owners(self, fname: str) -> List[Tuple[str, int]]:
        """
        Authors of a file with their total changes.

        Sorted ascending by changes; equal counts keep author-id order.
        """
        authors = self.database.authors_of_file(fname)
        if not authors:
            logger.debug(f"No owners recorded for {fname}")
            return []
        return sorted(authors, key=lambda entry: entry[1])

    def cousins(self, fname: str) -> List[Tuple[str, int]]:
        """
        Files changed in the same commits as a file, with shared commit counts.

        The file itself is never listed. Sorted ascending by count.
        """
        if not self.database.cochange_loaded:
            logger.warning("Co-change edges were not loaded; cousins are unavailable")
            return []

        correlated = self.database.files_correlated(fname)
        if not correlated:
            logger.debug(f"No cousins recorded for {fname}")
            return []

        others = [(other, count) for other, count in correlated if other != fname]
        return sorted(others, key=lambda entry: entry[1])

    def files_of(self, author: str) -> List[Tuple[str, int]]:
        """Files an author changed, sorted ascending by changes."""
        files = self.database.files_of_author(author)
        if not files:
            return []
        return sorted(files, key=lambda entry: entry[1])

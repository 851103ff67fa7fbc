"""
In-memory collaboration database loaded from a snapshot.

Names are looked up by binary search over the sorted author and file
lists; ids are positions in those lists.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from colabnet.graph.models import binary_search

logger = logging.getLogger(__name__)


@dataclass
class ColabNetDatabase:
    """
    Loaded snapshot.

    ``files_to_files`` is mirrored: an edge ``(a, b)`` is reachable from
    both ``a`` and ``b``. It stays empty when the snapshot was loaded
    without the co-change section.
    """

    authors: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    files_to_authors: Dict[int, Dict[int, int]] = field(default_factory=dict)
    files_to_files: Dict[int, Dict[int, int]] = field(default_factory=dict)
    skipped_records: int = 0
    cochange_loaded: bool = True

    def find_file(self, fname: str) -> Optional[int]:
        """Get the id of a file, or None if absent."""
        return binary_search(self.files, fname)

    def find_author(self, author: str) -> Optional[int]:
        """Get the id of an author, or None if absent."""
        return binary_search(self.authors, author)

    def get_author(self, idx: int) -> Optional[str]:
        if 0 <= idx < len(self.authors):
            return self.authors[idx]
        return None

    def get_file(self, idx: int) -> Optional[str]:
        if 0 <= idx < len(self.files):
            return self.files[idx]
        return None

    def authors_of_file(self, fname: str) -> Optional[List[Tuple[str, int]]]:
        """
        Get ``(author, changes)`` pairs for a file in author-id order.

        Returns:
            None when the file is unknown, otherwise a possibly empty list.
        """
        file_id = self.find_file(fname)
        if file_id is None:
            return None

        changemap = self.files_to_authors.get(file_id, {})
        return [
            (self.authors[author_id], changes)
            for author_id, changes in sorted(changemap.items())
        ]

    def files_correlated(self, fname: str) -> Optional[List[Tuple[str, int]]]:
        """
        Get ``(file, co-change count)`` pairs for a file in file-id order.

        The file's own self-edge is included when one was persisted.

        Returns:
            None when the file is unknown or has no co-change edges.
        """
        file_id = self.find_file(fname)
        if file_id is None:
            return None

        others = self.files_to_files.get(file_id)
        if others is None:
            return None

        return [(self.files[other_id], count) for other_id, count in sorted(others.items())]

    def files_of_author(self, author: str) -> Optional[List[Tuple[str, int]]]:
        """
        Get ``(file, changes)`` pairs for an author in file-id order.

        Returns:
            None when the author is unknown.
        """
        author_id = self.find_author(author)
        if author_id is None:
            return None

        return [
            (self.files[file_id], changemap[author_id])
            for file_id, changemap in sorted(self.files_to_authors.items())
            if author_id in changemap
        ]

    def get_statistics(self) -> Dict[str, int]:
        """Get database statistics."""
        return {
            "authors": len(self.authors),
            "files": len(self.files),
            "file_author_edges": sum(len(m) for m in self.files_to_authors.values()),
            "file_file_edges": sum(len(m) for m in self.files_to_files.values()),
            "skipped_records": self.skipped_records,
        }

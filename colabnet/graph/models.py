"""
Collaboration graph data structures.

Defines the name indices and the two weighted graphs (file-author and
file-file) produced by aggregation and consumed by the snapshot writer.
"""

import bisect
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


def binary_search(names: Sequence[str], name: str) -> Optional[int]:
    """
    Exact-match lookup in a sorted name list.

    Returns:
        Position of ``name`` or None when absent.
    """
    pos = bisect.bisect_left(names, name)
    if pos < len(names) and names[pos] == name:
        return pos
    return None


class NameIndex:
    """
    Bidirectional name/id map.

    Built once from the complete name set: names are sorted ascending and
    each name's id is its position in that order.
    """

    def __init__(self, names: Iterable[str] = ()):
        self._names: List[str] = sorted(set(names))
        self._ids: Dict[str, int] = {name: idx for idx, name in enumerate(self._names)}

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __contains__(self, name: str) -> bool:
        return name in self._ids

    @property
    def names(self) -> List[str]:
        """Names in id order."""
        return list(self._names)

    def id_of(self, name: str) -> Optional[int]:
        """Get the id assigned to a name."""
        return self._ids.get(name)

    def name_of(self, idx: int) -> Optional[str]:
        """Get the name for an id, or None when out of range."""
        if 0 <= idx < len(self._names):
            return self._names[idx]
        return None


@dataclass
class CollaborationGraphs:
    """
    Aggregated collaboration model for one repository.

    ``file_authors`` maps file id -> author id -> total changes.
    ``file_files`` maps ``(id1, id2)`` with ``id1 <= id2`` to the number of
    commits touching both files; ``(id, id)`` counts commits touching ``id``.
    """

    authors: NameIndex = field(default_factory=NameIndex)
    files: NameIndex = field(default_factory=NameIndex)
    file_authors: Dict[int, Dict[int, int]] = field(default_factory=dict)
    file_files: Dict[Tuple[int, int], int] = field(default_factory=dict)

    @property
    def author_count(self) -> int:
        return len(self.authors)

    @property
    def file_count(self) -> int:
        return len(self.files)

    def iter_file_author_edges(self) -> Iterator[Tuple[int, int, int]]:
        """Yield ``(file_id, author_id, changes)`` ordered by file then author."""
        for file_id in sorted(self.file_authors):
            changemap = self.file_authors[file_id]
            for author_id in sorted(changemap):
                yield file_id, author_id, changemap[author_id]

    def iter_file_file_edges(self) -> Iterator[Tuple[int, int, int]]:
        """Yield ``(file_id1, file_id2, count)`` with ``file_id1 <= file_id2``."""
        for (f1, f2) in sorted(self.file_files):
            yield f1, f2, self.file_files[(f1, f2)]

    def get_statistics(self) -> Dict[str, int]:
        """Get graph statistics."""
        return {
            "authors": self.author_count,
            "files": self.file_count,
            "file_author_edges": sum(len(m) for m in self.file_authors.values()),
            "file_file_edges": len(self.file_files),
        }

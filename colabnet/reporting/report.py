"""
Report data structures.

Defines owners, cousins and author-files reports. Entries are stored
highest weight first, the order in which they are presented.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass
class OwnerEntry:
    """An author and their total changes to a file."""

    author: str
    changes: int

    def to_dict(self) -> Dict[str, Any]:
        return {"author": self.author, "changes": self.changes}


@dataclass
class CousinEntry:
    """A correlated file with its shared commit count."""

    file: str
    count: int
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "count": self.count,
            "percentage": round(self.percentage, 2),
        }


@dataclass
class FileEntry:
    """A file and an author's total changes to it."""

    file: str
    changes: int

    def to_dict(self) -> Dict[str, Any]:
        return {"file": self.file, "changes": self.changes}


@dataclass
class Report:
    """Base report carrying the queried subject."""

    subject: str
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def kind(self) -> str:
        return "report"

    @property
    def is_empty(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "kind": self.kind,
            "subject": self.subject,
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass
class OwnersReport(Report):
    """Authors of a file ranked by changes."""

    entries: List[OwnerEntry] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "owners"

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["owners"] = [entry.to_dict() for entry in self.entries]
        return data


@dataclass
class CousinsReport(Report):
    """
    Files ranked by how often they change together with the subject.

    ``max_count`` is the largest shared commit count, the 100% mark.
    """

    max_count: int = 0
    entries: List[CousinEntry] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "cousins"

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["max_count"] = self.max_count
        data["cousins"] = [entry.to_dict() for entry in self.entries]
        return data


@dataclass
class AuthorFilesReport(Report):
    """Files an author changed, ranked by changes."""

    entries: List[FileEntry] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "files"

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["files"] = [entry.to_dict() for entry in self.entries]
        return data

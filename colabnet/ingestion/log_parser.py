"""
Commit log parser.

Turns the text of ``git log --stat`` into per-commit file change events
and commit groups for the aggregation stage.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from colabnet.core.config import ColabNetConfig
from colabnet.core.exceptions import ParseError
from colabnet.core.pipeline import PipelineStage, PipelineState
from colabnet.ingestion.rename import normalize_filename

logger = logging.getLogger(__name__)

# One leading space, a non-space, then a pipe somewhere on the line
STAT_LINE_PATTERN = re.compile(r"^ [^ ].*\|")

AUTHOR_PREFIX = "Author:"
COMMIT_PREFIX = "commit"


@dataclass(frozen=True)
class ChangeEvent:
    """A single file touched by a commit."""

    author: str
    file: str
    changes: int


@dataclass
class ParsedHistory:
    """
    Everything extracted from one pass over a commit log.

    ``commits`` holds one list of distinct file names per commit group,
    in the order the files were listed.
    """

    events: List[ChangeEvent] = field(default_factory=list)
    commits: List[List[str]] = field(default_factory=list)
    authors: Set[str] = field(default_factory=set)

    @property
    def files(self) -> Set[str]:
        """All distinct file names seen in the log."""
        return {event.file for event in self.events}

    def to_dict(self) -> Dict[str, Any]:
        """Summary counts for logging and metrics."""
        return {
            "events": len(self.events),
            "commits": len(self.commits),
            "authors": len(self.authors),
            "files": len(self.files),
        }


def parse_stat_line(line: str) -> Optional[Tuple[str, int]]:
    """
    Parse a ``git log --stat`` file row.

    Args:
        line: A raw log line.

    Returns:
        ``(file_name, changes)`` or None if the line is not a stat row.
    """
    if not STAT_LINE_PATTERN.match(line):
        return None

    name_part, _, count_part = line.partition("|")
    fname = normalize_filename(name_part.strip())

    tokens = count_part.split()
    changes = 0
    if tokens and tokens[0].isascii() and tokens[0].isdigit():
        changes = int(tokens[0])

    return fname, changes


def parse_author_line(line: str) -> str:
    """Return the author name carried by an ``Author:`` line."""
    return line.partition(":")[2].strip()


class LogParser(PipelineStage):
    """
    Pipeline stage for commit log parsing.

    Consumes the raw log text produced by the ingestion stage and
    produces a ParsedHistory.
    """

    def __init__(self, config: ColabNetConfig):
        super().__init__(config)

    @property
    def name(self) -> str:
        return "parsing"

    @property
    def dependencies(self) -> List[str]:
        return ["ingestion"]

    def execute(self, state: PipelineState) -> Tuple[ParsedHistory, Dict[str, Any]]:
        """
        Parse the log captured by the ingestion stage.

        Args:
            state: Pipeline state containing the raw log text.

        Returns:
            Tuple of (parsed_history, metrics).
        """
        log_text = state.data["ingestion"]["log"]
        history = self.parse(log_text)
        return history, history.to_dict()

    def parse(self, log_text: str) -> ParsedHistory:
        """
        Parse commit log text.

        Args:
            log_text: Full output of ``git log --stat``.

        Returns:
            ParsedHistory with change events, commit groups and authors.
        """
        return self.parse_lines(log_text.split("\n"))

    def parse_lines(self, lines: Iterable[str]) -> ParsedHistory:
        """Parse an iterable of log lines."""
        history = ParsedHistory()
        author = ""
        group: Dict[str, None] = {}
        orphaned = 0

        for lineno, line in enumerate(lines, start=1):
            line = line.rstrip("\r\n")
            if line.startswith(COMMIT_PREFIX):
                self._flush_group(history, group)
                continue

            if line.startswith(AUTHOR_PREFIX):
                author = parse_author_line(line)
                if author:
                    history.authors.add(author)
                continue

            try:
                parsed = parse_stat_line(line)
            except (ValueError, IndexError):
                raise ParseError(
                    f"Malformed rename notation on line {lineno}: {line.strip()}",
                    details={"line": lineno, "text": line},
                )
            if parsed is None:
                continue

            fname, changes = parsed
            if not fname:
                continue

            if not author:
                orphaned += 1
            history.events.append(ChangeEvent(author=author, file=fname, changes=changes))
            group[fname] = None

        self._flush_group(history, group)

        if orphaned:
            self.logger.warning(
                f"{orphaned} file changes had no author and carry no ownership weight"
            )

        self.logger.debug(
            f"Parsed {len(history.events)} file changes in "
            f"{len(history.commits)} commits by {len(history.authors)} authors"
        )
        return history

    @staticmethod
    def _flush_group(history: ParsedHistory, group: Dict[str, None]) -> None:
        """Close the current commit group."""
        if group:
            history.commits.append(list(group))
            group.clear()


def parse_log(log_text: str, config: ColabNetConfig = None) -> ParsedHistory:
    """
    Convenience function to parse commit log text.

    Args:
        log_text: Full output of ``git log --stat``.
        config: Optional configuration.

    Returns:
        Parsed history.
    """
    if config is None:
        from colabnet.core.config import Config
        config = Config.get()

    return LogParser(config).parse(log_text)

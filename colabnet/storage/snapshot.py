"""
Snapshot codec.

The snapshot is a UTF-8 text file with four sections separated by a
single blank line:

    1. author names, sorted (line index = author id)
    2. file names, sorted (line index = file id)
    3. ``<file-id> <author-id> <changes>`` ownership edges
    4. ``<file-id1> <file-id2> <count>`` co-change edges, file-id1 <= file-id2

There is no header, checksum or compression.
"""

import io
import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional, TextIO, Tuple

from colabnet.core.config import StorageConfig
from colabnet.core.exceptions import StorageError
from colabnet.graph.models import CollaborationGraphs
from colabnet.storage.database import ColabNetDatabase

logger = logging.getLogger(__name__)

AUTHORS_SECTION = 0
FILES_SECTION = 1
FILE_AUTHOR_SECTION = 2
FILE_FILE_SECTION = 3


def _parse_record(tokens: List[str]) -> Optional[Tuple[int, int, int]]:
    """Parse three non-negative integers, or None if any token is invalid."""
    values = []
    for token in tokens[:3]:
        if not (token.isascii() and token.isdigit()):
            return None
        values.append(int(token))
    return values[0], values[1], values[2]


class SnapshotCodec:
    """
    Reads and writes collaboration snapshots.

    Malformed edge records are skipped rather than failing the load; the
    number skipped is reported on the loaded database and logged.
    """

    def __init__(self, config: StorageConfig = None):
        self.config = config or StorageConfig()

    def dump(self, graphs: CollaborationGraphs, out: TextIO) -> int:
        """
        Write a snapshot to a text stream.

        Args:
            graphs: Aggregated graphs.
            out: Writable text stream.

        Returns:
            Number of lines written.
        """
        written = 0

        def emit(lines: Iterable[str]) -> None:
            nonlocal written
            for line in lines:
                out.write(line)
                out.write("\n")
                written += 1

        emit(graphs.authors)
        emit([""])
        emit(graphs.files)
        emit([""])
        emit(
            f"{file_id} {author_id} {changes}"
            for file_id, author_id, changes in graphs.iter_file_author_edges()
            if changes > 0
        )
        emit([""])
        emit(
            f"{f1} {f2} {count}"
            for f1, f2, count in graphs.iter_file_file_edges()
            if f1 <= f2 and count > 0
        )
        return written

    def dumps(self, graphs: CollaborationGraphs) -> str:
        """Serialize graphs to snapshot text."""
        buffer = io.StringIO()
        self.dump(graphs, buffer)
        return buffer.getvalue()

    def write(self, graphs: CollaborationGraphs, path: Path) -> Path:
        """
        Write a snapshot file, replacing any previous one.

        Raises:
            StorageError: If the file cannot be written.
        """
        path = Path(path)
        try:
            with open(path, "w", encoding=self.config.encoding, newline="\n") as f:
                lines = self.dump(graphs, f)
        except OSError as e:
            raise StorageError(
                f"Failed to write snapshot {path}: {e}",
                details={"path": str(path)},
            )

        logger.info(f"Saved snapshot to {path} ({lines} lines)")
        return path

    def load(self, lines: Iterable[str], load_file_to_file: bool = True) -> ColabNetDatabase:
        """
        Build a database from snapshot lines.

        Args:
            lines: Snapshot lines, with or without line terminators.
            load_file_to_file: Whether to ingest the co-change section. When
                False, reading stops where that section begins.

        Returns:
            Loaded ColabNetDatabase.
        """
        db = ColabNetDatabase(cochange_loaded=load_file_to_file)
        section = AUTHORS_SECTION

        for raw in lines:
            line = raw.rstrip("\r\n")

            if not line.strip():
                section += 1
                if section == FILE_FILE_SECTION and not load_file_to_file:
                    break
                if section > FILE_FILE_SECTION:
                    break
                continue

            if section == AUTHORS_SECTION:
                db.authors.append(line.strip())
            elif section == FILES_SECTION:
                db.files.append(line.strip())
            elif section == FILE_AUTHOR_SECTION:
                if not self._load_file_author(db, line.split()):
                    db.skipped_records += 1
            else:
                if not self._load_file_file(db, line.split()):
                    db.skipped_records += 1

        if db.skipped_records:
            logger.warning(f"Skipped {db.skipped_records} malformed snapshot records")

        return db

    def loads(self, text: str, load_file_to_file: bool = True) -> ColabNetDatabase:
        """Build a database from snapshot text."""
        return self.load(io.StringIO(text, newline="\n"), load_file_to_file)

    def read(self, path: Path, load_file_to_file: bool = True) -> ColabNetDatabase:
        """
        Load a snapshot file.

        Raises:
            StorageError: If the file is missing or unreadable.
        """
        path = Path(path)
        started = time.perf_counter()

        try:
            with open(path, "r", encoding=self.config.encoding, newline="\n") as f:
                db = self.load(f, load_file_to_file)
        except FileNotFoundError:
            raise StorageError(
                f"Snapshot not found: {path} (run 'colabnet scan' first)",
                details={"path": str(path)},
            )
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(
                f"Failed to read snapshot {path}: {e}",
                details={"path": str(path)},
            )

        elapsed = time.perf_counter() - started
        logger.info(f"Loaded snapshot {path} in {elapsed * 1000:.1f} ms")
        return db

    @staticmethod
    def _load_file_author(db: ColabNetDatabase, tokens: List[str]) -> bool:
        if len(tokens) < 3:
            return False

        record = _parse_record(tokens)
        if record is None:
            return False

        file_id, author_id, changes = record
        if file_id >= len(db.files) or author_id >= len(db.authors):
            return False

        db.files_to_authors.setdefault(file_id, {})[author_id] = changes
        return True

    @staticmethod
    def _load_file_file(db: ColabNetDatabase, tokens: List[str]) -> bool:
        if len(tokens) != 3:
            return False

        record = _parse_record(tokens)
        if record is None:
            return False

        f1, f2, count = record
        if f1 >= len(db.files) or f2 >= len(db.files):
            return False

        db.files_to_files.setdefault(f1, {})[f2] = count
        if f1 != f2:
            db.files_to_files.setdefault(f2, {})[f1] = count
        return True

"""
Aggregation of parsed history into collaboration graphs.

Folds change events into file-author totals and commit groups into
file-file co-change counts.
"""

import logging
from typing import Any, Dict, List, Tuple

from colabnet.core.config import ColabNetConfig
from colabnet.core.exceptions import AggregationError
from colabnet.core.pipeline import PipelineStage, PipelineState
from colabnet.graph.models import CollaborationGraphs, NameIndex
from colabnet.ingestion.log_parser import ParsedHistory

logger = logging.getLogger(__name__)


class Aggregator(PipelineStage):
    """
    Pipeline stage for graph aggregation.

    Ids are assigned only after the complete author and file sets are
    known, so the same history always yields the same ids.
    """

    def __init__(self, config: ColabNetConfig):
        super().__init__(config)

    @property
    def name(self) -> str:
        return "aggregation"

    @property
    def dependencies(self) -> List[str]:
        return ["parsing"]

    def execute(self, state: PipelineState) -> Tuple[CollaborationGraphs, Dict[str, Any]]:
        """
        Aggregate the history produced by the parsing stage.

        Args:
            state: Pipeline state containing the parsed history.

        Returns:
            Tuple of (graphs, metrics).
        """
        history = state.data["parsing"]
        graphs = self.aggregate(history)
        return graphs, graphs.get_statistics()

    def aggregate(self, history: ParsedHistory) -> CollaborationGraphs:
        """
        Build both collaboration graphs from parsed history.

        Args:
            history: Output of the log parser.

        Returns:
            CollaborationGraphs keyed by integer ids.
        """
        file_names = set(history.files)
        for group in history.commits:
            file_names.update(group)

        graphs = CollaborationGraphs(
            authors=NameIndex(history.authors),
            files=NameIndex(file_names),
        )

        self._fold_changes(history, graphs)
        self._fold_commits(history, graphs)

        stats = graphs.get_statistics()
        self.logger.info(
            f"Aggregated {stats['files']} files and {stats['authors']} authors: "
            f"{stats['file_author_edges']} ownership edges, "
            f"{stats['file_file_edges']} co-change edges"
        )
        return graphs

    def _fold_changes(self, history: ParsedHistory, graphs: CollaborationGraphs) -> None:
        """Sum change counts per (file, author)."""
        for event in history.events:
            if not event.author:
                continue

            file_id = self._require_id(graphs.files, event.file, "file")
            author_id = self._require_id(graphs.authors, event.author, "author")

            changemap = graphs.file_authors.setdefault(file_id, {})
            changemap[author_id] = changemap.get(author_id, 0) + event.changes

    def _fold_commits(self, history: ParsedHistory, graphs: CollaborationGraphs) -> None:
        """Count every unordered file pair, self pairs included, once per commit."""
        for group in history.commits:
            ids = sorted({self._require_id(graphs.files, fname, "file") for fname in group})

            for i, first in enumerate(ids):
                for second in ids[i:]:
                    key = (first, second)
                    graphs.file_files[key] = graphs.file_files.get(key, 0) + 1

    @staticmethod
    def _require_id(index: NameIndex, name: str, kind: str) -> int:
        idx = index.id_of(name)
        if idx is None:
            raise AggregationError(
                f"No id assigned to {kind}: {name}",
                details={"kind": kind, "name": name},
            )
        return idx


def aggregate(
    history: ParsedHistory,
    config: ColabNetConfig = None,
) -> CollaborationGraphs:
    """
    Convenience function to aggregate parsed history.

    Args:
        history: Output of the log parser.
        config: Optional configuration.

    Returns:
        Aggregated CollaborationGraphs.
    """
    if config is None:
        from colabnet.core.config import Config
        config = Config.get()

    return Aggregator(config).aggregate(history)

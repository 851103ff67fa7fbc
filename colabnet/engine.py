"""
Main engine for colabnet.

Provides a high-level interface for rebuilding a repository's snapshot
and answering owners and cousins queries from it.
"""

import logging
from pathlib import Path
from typing import List, Optional

from colabnet.core.config import Config, ColabNetConfig
from colabnet.core.pipeline import Pipeline, PipelineState
from colabnet.graph.aggregator import Aggregator
from colabnet.graph.collaboration import (
    build_author_graph,
    build_ownership_graph,
    render_author_dot,
    render_ownership_dot,
)
from colabnet.graph.models import CollaborationGraphs
from colabnet.ingestion.git_handler import GitHandler
from colabnet.ingestion.ingestor import HistoryIngestor
from colabnet.ingestion.log_parser import LogParser
from colabnet.query.engine import QueryEngine
from colabnet.reporting.generator import ReportGenerator
from colabnet.reporting.report import AuthorFilesReport, CousinsReport, OwnersReport
from colabnet.storage.database import ColabNetDatabase
from colabnet.storage.manager import SnapshotStore
from colabnet.utils.validation import to_repo_relative

logger = logging.getLogger(__name__)

GRAPH_MODES = ("files", "authors")


class ColabNetEngine:
    """
    Main engine for collaboration analysis of one repository.

    The repository root is discovered from ``start_dir`` on first use.
    """

    def __init__(
        self,
        config: ColabNetConfig = None,
        start_dir: Optional[Path] = None,
        git_handler: GitHandler = None,
    ):
        self.config = config or Config.get()
        self.start_dir = Path(start_dir) if start_dir else Path.cwd()
        self.git_handler = git_handler or GitHandler(self.config.ingestion)
        self.store = SnapshotStore(self.config)
        self.reports = ReportGenerator()
        self._repo_root: Optional[Path] = None

    @property
    def repo_root(self) -> Path:
        """Root of the repository being analyzed."""
        if self._repo_root is None:
            self._repo_root = self.git_handler.find_repository_root(self.start_dir)
        return self._repo_root

    def _create_pipeline(self) -> Pipeline:
        """Create and configure the scan pipeline."""
        pipeline = Pipeline(self.config)

        pipeline.register_stage(HistoryIngestor(self.config, self.git_handler))
        pipeline.register_stage(LogParser(self.config))
        pipeline.register_stage(Aggregator(self.config))
        pipeline.register_stage(self.store)

        pipeline.set_execution_order([
            "ingestion",
            "parsing",
            "aggregation",
            "storage",
        ])

        return pipeline

    def scan(self, log_args: List[str] = None) -> PipelineState:
        """
        Rebuild the snapshot from the full commit history.

        Args:
            log_args: Extra ``git log`` arguments.

        Returns:
            Final pipeline state; ``state.data["aggregation"]`` holds the graphs.
        """
        root = self.repo_root
        logger.info(f"Scanning {root}")
        return self._create_pipeline().run(root, log_args)

    def graph(self, mode: str = "files", log_args: List[str] = None) -> str:
        """
        Rebuild the snapshot and render a DOT collaboration graph.

        Args:
            mode: "files" for author -> file ownership, "authors" for
                author pairs linked by shared files.
            log_args: Extra ``git log`` arguments.

        Returns:
            DOT text.
        """
        if mode not in GRAPH_MODES:
            raise ValueError(f"Unknown graph mode: {mode}")

        state = self.scan(log_args)
        graphs: CollaborationGraphs = state.data["aggregation"]

        if mode == "authors":
            return render_author_dot(build_author_graph(graphs))
        return render_ownership_dot(build_ownership_graph(graphs))

    def load(self, load_file_to_file: bool = True) -> ColabNetDatabase:
        """Load the repository's snapshot."""
        return self.store.load(self.repo_root, load_file_to_file)

    def resolve(self, path: str) -> str:
        """Convert a user path into a snapshot file name."""
        return to_repo_relative(path, self.repo_root, self.start_dir)

    def owners(self, path: str) -> OwnersReport:
        """Authors of a file ranked by changes, highest first."""
        fname = self.resolve(path)
        query = QueryEngine(self.load(load_file_to_file=False))
        return self.reports.owners_report(fname, query.owners(fname))

    def cousins(self, path: str) -> CousinsReport:
        """Files that change with a file, ranked by shared commits."""
        fname = self.resolve(path)
        query = QueryEngine(self.load(load_file_to_file=True))
        return self.reports.cousins_report(fname, query.cousins(fname))

    def files_of(self, author: str) -> AuthorFilesReport:
        """Files an author changed, ranked by changes."""
        query = QueryEngine(self.load(load_file_to_file=False))
        return self.reports.author_files_report(author, query.files_of(author))

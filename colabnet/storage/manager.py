"""
Snapshot storage manager.

Provides the storage pipeline stage and the high-level interface for
locating, writing and loading a repository's snapshot.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

from colabnet.core.config import ColabNetConfig
from colabnet.core.pipeline import PipelineStage, PipelineState
from colabnet.graph.models import CollaborationGraphs
from colabnet.storage.database import ColabNetDatabase
from colabnet.storage.snapshot import SnapshotCodec

logger = logging.getLogger(__name__)


class SnapshotStore(PipelineStage):
    """
    Pipeline stage for snapshot persistence.

    The snapshot lives at the repository root under a fixed name and is
    overwritten wholesale on every scan.
    """

    def __init__(self, config: ColabNetConfig):
        super().__init__(config)
        self.codec = SnapshotCodec(config.storage)

    @property
    def name(self) -> str:
        return "storage"

    @property
    def dependencies(self) -> List[str]:
        return ["aggregation"]

    def execute(self, state: PipelineState) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Persist the graphs produced by the aggregation stage.

        Args:
            state: Pipeline state containing aggregated graphs.

        Returns:
            Tuple of (storage_results, metrics).
        """
        graphs: CollaborationGraphs = state.data["aggregation"]
        path = self.save(graphs, state.repo_root)

        metrics = {
            "snapshot_path": str(path),
            "snapshot_bytes": path.stat().st_size,
        }
        return {"path": path, "graphs": graphs}, metrics

    def snapshot_path(self, repo_root: Path) -> Path:
        """Path of the snapshot file for a repository."""
        return Path(repo_root) / self.config.storage.snapshot_name

    def exists(self, repo_root: Path) -> bool:
        """Check if a snapshot has been written for a repository."""
        return self.snapshot_path(repo_root).is_file()

    def save(self, graphs: CollaborationGraphs, repo_root: Path) -> Path:
        """Write the snapshot for a repository."""
        return self.codec.write(graphs, self.snapshot_path(repo_root))

    def load(self, repo_root: Path, load_file_to_file: bool = True) -> ColabNetDatabase:
        """
        Load the snapshot for a repository.

        Args:
            repo_root: Repository root holding the snapshot.
            load_file_to_file: Whether to load co-change edges.

        Returns:
            Loaded ColabNetDatabase.
        """
        db = self.codec.read(self.snapshot_path(repo_root), load_file_to_file)
        logger.debug(f"Snapshot statistics: {db.get_statistics()}")
        return db

    def get_storage_stats(self, repo_root: Path) -> Dict[str, Any]:
        """Get snapshot file statistics."""
        path = self.snapshot_path(repo_root)
        exists = self.exists(repo_root)
        size = path.stat().st_size if exists else 0

        return {
            "snapshot_path": str(path),
            "exists": exists,
            "total_size_bytes": size,
            "total_size_kb": size / 1024,
        }

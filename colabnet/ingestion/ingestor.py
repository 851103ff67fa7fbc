"""
History ingestion pipeline stage.

Reads the commit log of the repository being scanned.
"""

import logging
from typing import Any, Dict, Tuple

from colabnet.core.config import ColabNetConfig
from colabnet.core.pipeline import PipelineStage, PipelineState
from colabnet.ingestion.git_handler import GitHandler

logger = logging.getLogger(__name__)


class HistoryIngestor(PipelineStage):
    """
    Pipeline stage for commit log ingestion.

    Runs ``git log --stat`` in the repository root and hands the raw
    text to the parsing stage.
    """

    def __init__(self, config: ColabNetConfig, git_handler: GitHandler = None):
        super().__init__(config)
        self.git_handler = git_handler or GitHandler(config.ingestion)

    @property
    def name(self) -> str:
        return "ingestion"

    def execute(self, state: PipelineState) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Read the commit log.

        Args:
            state: Current pipeline state holding the repository root and log arguments.

        Returns:
            Tuple of (output_data, metrics).
        """
        self.logger.info(f"Reading history of {state.repo_root}")

        log_text = self.git_handler.read_log(state.repo_root, state.log_args)

        metrics = {
            "log_bytes": len(log_text.encode("utf-8")),
            "log_lines": log_text.count("\n"),
        }
        return {"log": log_text}, metrics

"""
Core module containing pipeline orchestration, configuration, and exceptions.
"""

from colabnet.core.config import Config, ColabNetConfig
from colabnet.core.pipeline import Pipeline, PipelineStage, PipelineState
from colabnet.core.exceptions import (
    ColabNetError,
    IngestionError,
    ParseError,
    AggregationError,
    StorageError,
    QueryError,
    RepositoryNotFoundError,
)

__all__ = [
    "Config",
    "ColabNetConfig",
    "Pipeline",
    "PipelineStage",
    "PipelineState",
    "ColabNetError",
    "IngestionError",
    "ParseError",
    "AggregationError",
    "StorageError",
    "QueryError",
    "RepositoryNotFoundError",
]

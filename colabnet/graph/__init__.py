"""
Collaboration graph construction and export.

Provides the aggregated author-file and file-file graphs and their
NetworkX/DOT projections.
"""

from colabnet.graph.models import CollaborationGraphs, NameIndex
from colabnet.graph.aggregator import Aggregator, aggregate
from colabnet.graph.collaboration import (
    build_author_graph,
    build_ownership_graph,
    render_author_dot,
    render_ownership_dot,
)

__all__ = [
    "CollaborationGraphs",
    "NameIndex",
    "Aggregator",
    "aggregate",
    "build_author_graph",
    "build_ownership_graph",
    "render_author_dot",
    "render_ownership_dot",
]

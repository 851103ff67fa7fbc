"""
Collaboration graph export.

Projects the aggregated model onto NetworkX graphs (author -> file
ownership, and author <-> author collaboration through shared files)
and renders them as Graphviz DOT text.
"""

import json
import logging
from itertools import combinations
from typing import List

import networkx as nx

from colabnet.graph.models import CollaborationGraphs

logger = logging.getLogger(__name__)

AUTHOR = "author"
FILE = "file"


def _quote(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_ownership_graph(graphs: CollaborationGraphs) -> nx.DiGraph:
    """
    Build a directed author -> file graph.

    Nodes are ``(kind, name)`` tuples so an author and a file sharing a
    name stay distinct. Edge ``weight`` is the author's total changes.
    """
    graph = nx.DiGraph(name="colabnet")

    for file_id, author_id, changes in graphs.iter_file_author_edges():
        author = graphs.authors.name_of(author_id)
        fname = graphs.files.name_of(file_id)
        graph.add_node((AUTHOR, author), kind=AUTHOR, label=author)
        graph.add_node((FILE, fname), kind=FILE, label=fname)
        graph.add_edge((AUTHOR, author), (FILE, fname), weight=changes)

    return graph


def build_author_graph(graphs: CollaborationGraphs) -> nx.Graph:
    """
    Build an undirected graph linking authors who changed the same files.

    Each edge carries ``files`` (sorted names of the shared files) and
    ``weight`` (how many files are shared).
    """
    graph = nx.Graph(name="colabnet")

    for file_id in sorted(graphs.file_authors):
        fname = graphs.files.name_of(file_id)
        authors = sorted(
            graphs.authors.name_of(author_id)
            for author_id in graphs.file_authors[file_id]
        )
        graph.add_nodes_from(authors)

        for first, second in combinations(authors, 2):
            if graph.has_edge(first, second):
                graph.edges[first, second]["files"].add(fname)
            else:
                graph.add_edge(first, second, files={fname})

    for _, _, data in graph.edges(data=True):
        data["files"] = sorted(data["files"])
        data["weight"] = len(data["files"])

    logger.debug(
        f"Author graph: {graph.number_of_nodes()} authors, "
        f"{graph.number_of_edges()} collaborations"
    )
    return graph


def render_ownership_dot(graph: nx.DiGraph) -> str:
    """Render an ownership graph as a DOT digraph, ordered by file then author."""
    edges = sorted(
        graph.edges(data=True),
        key=lambda edge: (edge[1][1], edge[0][1]),
    )

    lines: List[str] = ["digraph colabnet {"]
    for (_, author), (_, fname), data in edges:
        lines.append(f"{_quote(author)} -> {_quote(fname)} [weight={data['weight']}] ")
    lines.append("}")
    return "\n".join(lines)


def render_author_dot(graph: nx.Graph) -> str:
    """Render an author graph as a DOT graph, one line per author pair."""
    rows = []
    for first, second, data in graph.edges(data=True):
        first, second = sorted((first, second))
        pair = f"{_quote(first)} -- {_quote(second)}"
        files = ", ".join(json.dumps(fname, ensure_ascii=False) for fname in data["files"])
        weight = data["weight"]
        rows.append((pair, f"{pair} [weight={weight}, penwidth={weight}] // {{{files}}}"))

    lines: List[str] = ["graph colabnet {"]
    lines.extend(row for _, row in sorted(rows))
    lines.append("}")
    return "\n".join(lines)

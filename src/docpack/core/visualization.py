"""Build the visualization graph from a code graph."""

import logging
from typing import List

from docpack.core.classifier import classify
from docpack.core.models import (
    ClusterData,
    Graph,
    get_node_kind_label,
    get_node_name,
    is_node_public,
)
from docpack.core.schemas import (
    TopSymbol,
    VisualizationEdge,
    VisualizationGraph,
    VisualizationNode,
    VisualizationStats,
)

logger = logging.getLogger(__name__)

TOP_SYMBOLS_LIMIT = 10


def build_visualization(graph: Graph) -> VisualizationGraph:
    """Project every node and edge, classify nodes, and aggregate stats.

    Nodes keep the graph's iteration order; edges are passed through in order,
    including duplicates and edges whose endpoints are not in the graph.
    """
    nodes: List[VisualizationNode] = []
    for node_id, node in graph.nodes.items():
        role, importance = classify(node)
        cluster = node.kind.name if isinstance(node.kind, ClusterData) else None
        nodes.append(VisualizationNode(
            id=node_id,
            name=get_node_name(node),
            kind=get_node_kind_label(node),
            file=node.location.file,
            line=node.location.start_line,
            fan_in=node.metadata.fan_in,
            fan_out=node.metadata.fan_out,
            role=role,
            importance=importance,
            is_public=is_node_public(node),
            complexity=node.metadata.complexity,
            cluster=cluster,
        ))

    edges = [
        VisualizationEdge(source=edge.source, target=edge.target, kind=edge.kind)
        for edge in graph.edges
    ]

    stats = VisualizationStats(
        node_count=len(nodes),
        edge_count=len(edges),
        function_count=_count_kind(nodes, "function"),
        type_count=_count_kind(nodes, "type"),
        module_count=_count_kind(nodes, "module"),
        cluster_count=_count_kind(nodes, "cluster"),
        languages=list(graph.metadata.languages),
        top_symbols=top_symbols(nodes),
    )
    logger.debug(
        f"Built visualization: {stats.node_count} nodes, {stats.edge_count} edges, "
        f"{stats.cluster_count} clusters"
    )
    return VisualizationGraph(nodes=nodes, edges=edges, stats=stats)


def top_symbols(nodes: List[VisualizationNode], limit: int = TOP_SYMBOLS_LIMIT) -> List[TopSymbol]:
    """Highest-importance nodes, ties kept in their original order."""
    ranked = sorted(nodes, key=lambda n: n.importance, reverse=True)
    return [
        TopSymbol(id=n.id, name=n.name, importance=n.importance, role=n.role)
        for n in ranked[:limit]
    ]


def _count_kind(nodes: List[VisualizationNode], label: str) -> int:
    return sum(1 for n in nodes if n.kind == label)

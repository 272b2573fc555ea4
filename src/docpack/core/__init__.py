"""Docpack content model and code-graph visualization.

1. Models (models.py):
   - Code graph entities: nodes with a closed set of kinds, edges, metadata
   - Name / kind-label / visibility accessors

2. Archive codec (archive.py):
   - Decodes current (graph/documentation/metadata) and legacy
     (manifest/symbols/docs) docpacks, encodes them back

3. Classifier (classifier.py) and visualization builder (visualization.py):
   - Per-node role and importance, whole-graph projection with stats

4. Legacy adapter (legacy.py), edit overlay (edits.py), service (service.py)

Example Usage:

    from docpack.core import decode, build_visualization

    archive = decode(data)
    view = build_visualization(archive.graph)
    for symbol in view.stats.top_symbols:
        print(f"{symbol.name}: {symbol.importance}")
"""

from .archive import (
    Archive,
    ArchiveShape,
    CurrentArchive,
    DecodeError,
    LegacyArchive,
    MalformedArchive,
    UnknownShape,
    decode,
    detect_shape,
    encode,
)
from .classifier import classify
from .edits import apply_symbol_edits
from .legacy import legacy_to_graph
from .models import (
    EdgeKind,
    Graph,
    GraphEdge,
    GraphNode,
    NodeKind,
    check_connectivity,
    get_node_kind_label,
    get_node_name,
    is_node_public,
)
from .schemas import SymbolEdit, VisualizationGraph, VisualizationRole
from .service import ArchiveNotReady, DocpackService
from .visualization import build_visualization

__all__ = [
    "Archive",
    "ArchiveNotReady",
    "ArchiveShape",
    "CurrentArchive",
    "DecodeError",
    "DocpackService",
    "EdgeKind",
    "Graph",
    "GraphEdge",
    "GraphNode",
    "LegacyArchive",
    "MalformedArchive",
    "NodeKind",
    "SymbolEdit",
    "UnknownShape",
    "VisualizationGraph",
    "VisualizationRole",
    "apply_symbol_edits",
    "build_visualization",
    "check_connectivity",
    "classify",
    "decode",
    "detect_shape",
    "encode",
    "get_node_kind_label",
    "get_node_name",
    "is_node_public",
    "legacy_to_graph",
]

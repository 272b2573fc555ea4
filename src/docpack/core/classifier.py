"""Role classification and importance scoring for graph nodes.

Both are pure functions of a single node: its kind, its kind-level visibility
and its connectivity metadata. No score is normalised against other nodes.

Role precedence (first match wins):

1. Cluster nodes -> Cluster
2. Type nodes -> DataModel
3. fan_in above threshold -> CoreUtility
4. fan_out above threshold -> EntryPoint
5. not public -> Internal
6. otherwise -> Standard

Importance:

    fan_in * 2 + fan_out + (complexity or 0) / 10 + (5 if is_public_api)
"""

from typing import Tuple

from docpack.core.models import GraphNode, GraphNodeMetadata, NodeKind, is_node_public
from docpack.core.schemas import VisualizationRole

CORE_UTILITY_FAN_IN = 5
ENTRY_POINT_FAN_OUT = 5

FAN_IN_WEIGHT = 2
FAN_OUT_WEIGHT = 1
COMPLEXITY_DIVISOR = 10
PUBLIC_API_BONUS = 5


def assign_role(node: GraphNode) -> VisualizationRole:
    kind = node.node_kind
    if kind is NodeKind.CLUSTER:
        return VisualizationRole.CLUSTER
    if kind is NodeKind.TYPE:
        return VisualizationRole.DATA_MODEL
    if node.metadata.fan_in > CORE_UTILITY_FAN_IN:
        return VisualizationRole.CORE_UTILITY
    if node.metadata.fan_out > ENTRY_POINT_FAN_OUT:
        return VisualizationRole.ENTRY_POINT
    if not is_node_public(node):
        return VisualizationRole.INTERNAL
    return VisualizationRole.STANDARD


def compute_importance(metadata: GraphNodeMetadata) -> float:
    """Score a node from its metadata alone.

    ``is_public_api`` is the package-surface flag, not the kind-level
    ``is_public`` used by ``assign_role``.
    """
    complexity = metadata.complexity or 0
    score = (
        metadata.fan_in * FAN_IN_WEIGHT
        + metadata.fan_out * FAN_OUT_WEIGHT
        + complexity / COMPLEXITY_DIVISOR
    )
    if metadata.is_public_api:
        score += PUBLIC_API_BONUS
    return float(score)


def classify(node: GraphNode) -> Tuple[VisualizationRole, float]:
    """Return the node's visualization role and importance score."""
    return assign_role(node), compute_importance(node.metadata)

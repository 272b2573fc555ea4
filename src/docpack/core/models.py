"""Code graph entity model.

Typed view of the ``graph.json`` member of a docpack: nodes keyed by id, an
ordered edge list and graph-level metadata. Node kinds are a closed set of
payload models; on the wire a node's kind is externally tagged
(``{"Function": {...}}``).

Every record allows extra keys so that fields written by newer builders survive
a decode/encode cycle untouched.
"""

from collections import Counter
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


# ============================================================================
# Enums
# ============================================================================

class NodeKind(str, Enum):
    """Tag of a graph node's kind variant."""
    FUNCTION = "Function"
    TYPE = "Type"
    TRAIT = "Trait"
    MODULE = "Module"
    CONSTANT = "Constant"
    FILE = "File"
    CLUSTER = "Cluster"
    PACKAGE = "Package"
    MACRO = "Macro"


class EdgeKind(str, Enum):
    """Relationship kind between two graph nodes."""
    CALLS = "Calls"
    IMPORTS = "Imports"
    TYPE_REFERENCE = "TypeReference"
    DATA_FLOW = "DataFlow"
    MODULE_OWNERSHIP = "ModuleOwnership"
    TRAIT_IMPLEMENTATION = "TraitImplementation"
    INHERITANCE = "Inheritance"
    METHOD_OF = "MethodOf"
    DEFINED_IN = "DefinedIn"
    INFERRED_TYPE = "InferredType"
    TRAIT_METHOD_CALL = "TraitMethodCall"
    METHOD_DISPATCH = "MethodDispatch"
    MACRO_EXPANSION = "MacroExpansion"
    TRAIT_PROVIDES = "TraitProvides"


class TypeKind(str, Enum):
    """Sub-kind of a Type node."""
    STRUCT = "Struct"
    CLASS = "Class"
    ENUM = "Enum"
    INTERFACE = "Interface"
    TRAIT = "Trait"
    UNION = "Union"
    TYPE_ALIAS = "TypeAlias"


class MacroType(str, Enum):
    DECLARATIVE = "Declarative"
    PROCEDURAL = "Procedural"
    DERIVE = "Derive"
    ATTRIBUTE = "Attribute"


UNKNOWN_LABEL = "unknown"


# ============================================================================
# Kind payloads
# ============================================================================

class GraphParameter(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    param_type: Optional[str] = None
    is_mutable: bool = False


class GraphField(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    field_type: Optional[str] = None
    is_public: bool = False


class KindData(BaseModel):
    """Base for the per-kind payload carried by a node.

    Subclasses set ``tag`` and ``label``; kinds without a visibility concept
    leave ``is_visible`` reporting True.
    """

    model_config = ConfigDict(extra="allow")

    tag: ClassVar[Optional[NodeKind]] = None
    label: ClassVar[str] = UNKNOWN_LABEL

    @property
    def display_name(self) -> str:
        return getattr(self, "name", UNKNOWN_LABEL)

    @property
    def is_visible(self) -> bool:
        return True


class FunctionData(KindData):
    tag: ClassVar[NodeKind] = NodeKind.FUNCTION
    label: ClassVar[str] = "function"

    name: str = ""
    signature: str = ""
    is_public: bool = False
    is_async: bool = False
    is_method: bool = False
    parameters: List[GraphParameter] = Field(default_factory=list)
    return_type: Optional[str] = None

    @property
    def is_visible(self) -> bool:
        return self.is_public


class TypeData(KindData):
    tag: ClassVar[NodeKind] = NodeKind.TYPE
    label: ClassVar[str] = "type"

    name: str = ""
    kind: TypeKind = TypeKind.STRUCT
    is_public: bool = False
    fields: List[GraphField] = Field(default_factory=list)
    methods: List[str] = Field(default_factory=list, description="Method node ids")

    @property
    def is_visible(self) -> bool:
        return self.is_public


class TraitData(KindData):
    tag: ClassVar[NodeKind] = NodeKind.TRAIT
    label: ClassVar[str] = "trait"

    name: str = ""
    is_public: bool = False
    methods: List[str] = Field(default_factory=list)
    implementors: List[str] = Field(default_factory=list)

    @property
    def is_visible(self) -> bool:
        return self.is_public


class ModuleData(KindData):
    tag: ClassVar[NodeKind] = NodeKind.MODULE
    label: ClassVar[str] = "module"

    name: str = ""
    path: str = ""
    is_public: bool = False
    children: List[str] = Field(default_factory=list)

    @property
    def is_visible(self) -> bool:
        return self.is_public


class ConstantData(KindData):
    tag: ClassVar[NodeKind] = NodeKind.CONSTANT
    label: ClassVar[str] = "constant"

    name: str = ""
    value_type: Optional[str] = None
    is_public: bool = False

    @property
    def is_visible(self) -> bool:
        return self.is_public


class FileData(KindData):
    tag: ClassVar[NodeKind] = NodeKind.FILE
    label: ClassVar[str] = "file"

    path: str = ""
    language: str = ""
    size_bytes: int = 0
    line_count: int = 0
    symbols: List[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.path


class ClusterData(KindData):
    tag: ClassVar[NodeKind] = NodeKind.CLUSTER
    label: ClassVar[str] = "cluster"

    name: str = ""
    topic: Optional[str] = None
    members: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    centroid: Optional[List[float]] = None


class PackageData(KindData):
    tag: ClassVar[NodeKind] = NodeKind.PACKAGE
    label: ClassVar[str] = "package"

    name: str = ""
    version: Optional[str] = None
    modules: List[str] = Field(default_factory=list)


class MacroData(KindData):
    tag: ClassVar[NodeKind] = NodeKind.MACRO
    label: ClassVar[str] = "macro"

    name: str = ""
    is_public: bool = False
    macro_type: MacroType = MacroType.DECLARATIVE
    pattern: Optional[str] = None

    @property
    def is_visible(self) -> bool:
        return self.is_public


class UnknownKindData(KindData):
    """A kind tag this model does not recognise.

    The original JSON value is kept in ``raw`` and written back as-is.
    """

    unknown_tag: Optional[str] = None
    raw: Any = None

    @property
    def display_name(self) -> str:
        return UNKNOWN_LABEL


NodeKindData = Union[
    FunctionData,
    TypeData,
    TraitData,
    ModuleData,
    ConstantData,
    FileData,
    ClusterData,
    PackageData,
    MacroData,
    UnknownKindData,
]

KIND_DATA_TYPES: Dict[NodeKind, type] = {
    NodeKind.FUNCTION: FunctionData,
    NodeKind.TYPE: TypeData,
    NodeKind.TRAIT: TraitData,
    NodeKind.MODULE: ModuleData,
    NodeKind.CONSTANT: ConstantData,
    NodeKind.FILE: FileData,
    NodeKind.CLUSTER: ClusterData,
    NodeKind.PACKAGE: PackageData,
    NodeKind.MACRO: MacroData,
}


def parse_node_kind(value: Any) -> KindData:
    """Turn an externally tagged kind object into its payload model.

    Anything that is not a single-key object with a recognised tag becomes an
    ``UnknownKindData`` rather than an error.
    """
    if isinstance(value, KindData):
        return value
    if isinstance(value, dict) and len(value) == 1:
        tag, payload = next(iter(value.items()))
        try:
            kind = NodeKind(tag)
        except ValueError:
            return UnknownKindData(unknown_tag=str(tag), raw=value)
        return KIND_DATA_TYPES[kind].model_validate(payload if payload is not None else {})
    return UnknownKindData(raw=value)


def dump_node_kind(kind: KindData) -> Any:
    if isinstance(kind, UnknownKindData):
        return kind.raw
    return {kind.tag.value: kind.model_dump(mode="json")}


# ============================================================================
# Nodes, edges, graph
# ============================================================================

class GraphLocation(BaseModel):
    model_config = ConfigDict(extra="allow")

    file: str = ""
    start_line: int = 0
    end_line: int = 0
    start_col: int = 0
    end_col: int = 0


class GraphNodeMetadata(BaseModel):
    """Connectivity and documentation metadata computed by the builder.

    ``fan_in``/``fan_out`` are trusted as given; see ``check_connectivity``.
    """

    model_config = ConfigDict(extra="allow")

    complexity: Optional[Union[int, float]] = None
    fan_in: int = 0
    fan_out: int = 0
    is_public_api: bool = False
    docstring: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    source_snippet: Optional[str] = None


class GraphNode(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    kind: NodeKindData
    location: GraphLocation = Field(default_factory=GraphLocation)
    metadata: GraphNodeMetadata = Field(default_factory=GraphNodeMetadata)

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> KindData:
        return parse_node_kind(value)

    @field_serializer("kind")
    def _dump_kind(self, kind: KindData) -> Any:
        return dump_node_kind(kind)

    @property
    def node_kind(self) -> Optional[NodeKind]:
        """The kind tag, or None when the tag was not recognised."""
        return self.kind.tag


class GraphEdge(BaseModel):
    model_config = ConfigDict(extra="allow")

    source: str
    target: str
    # Unrecognised relationship names are kept as plain strings
    kind: Union[EdgeKind, str] = Field(..., union_mode="left_to_right")


class GraphMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    repository_name: Optional[str] = None
    total_files: int = 0
    total_symbols: int = 0
    languages: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None


class Graph(BaseModel):
    """Contents of ``graph.json``."""

    model_config = ConfigDict(extra="allow")

    nodes: Dict[str, GraphNode] = Field(default_factory=dict)
    edges: List[GraphEdge] = Field(default_factory=list)
    metadata: GraphMetadata = Field(default_factory=GraphMetadata)


# ============================================================================
# Accessors
# ============================================================================

def get_node_name(node: GraphNode) -> str:
    """Display name: the ``path`` for files, the ``name`` for everything else."""
    return node.kind.display_name


def get_node_kind_label(node: GraphNode) -> str:
    return node.kind.label


def is_node_public(node: GraphNode) -> bool:
    """Kind-level visibility. Files, clusters and packages are always public."""
    return node.kind.is_visible


# ============================================================================
# Connectivity check
# ============================================================================

class ConnectivityMismatch(BaseModel):
    """A node whose stored fan-in/fan-out disagrees with the edge list."""

    node_id: str
    stored_fan_in: int
    stored_fan_out: int
    edge_fan_in: int
    edge_fan_out: int


def check_connectivity(graph: Graph) -> List[ConnectivityMismatch]:
    """Recount fan-in/fan-out from the edges and report disagreements.

    Dangling edge endpoints are counted but never reported, since they have no
    node to compare against.
    """
    incoming: Counter = Counter(edge.target for edge in graph.edges)
    outgoing: Counter = Counter(edge.source for edge in graph.edges)

    mismatches: List[ConnectivityMismatch] = []
    for node_id, node in graph.nodes.items():
        fan_in = incoming.get(node_id, 0)
        fan_out = outgoing.get(node_id, 0)
        if fan_in != node.metadata.fan_in or fan_out != node.metadata.fan_out:
            mismatches.append(ConnectivityMismatch(
                node_id=node_id,
                stored_fan_in=node.metadata.fan_in,
                stored_fan_out=node.metadata.fan_out,
                edge_fan_in=fan_in,
                edge_fan_out=fan_out,
            ))
    return mismatches

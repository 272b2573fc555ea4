"""
Pydantic schemas for docpack members and derived views.

This module defines the documentation and package-metadata records of the
current archive format, the manifest/symbol/doc records of the legacy format,
symbol edits, and the visualization DTOs handed to the rendering layer.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from docpack.core.models import EdgeKind, Graph


# Enums

class JobStatus(str, Enum):
    """Lifecycle state of the build job that produces an archive."""
    PENDING = "pending"
    BUILDING = "building"
    COMPLETED = "completed"
    FAILED = "failed"


class VisualizationRole(str, Enum):
    """Semantic category assigned to a node for rendering."""
    CORE_UTILITY = "CoreUtility"  # high fan-in
    ENTRY_POINT = "EntryPoint"  # high fan-out
    DATA_MODEL = "DataModel"
    INTERNAL = "Internal"
    CLUSTER = "Cluster"
    STANDARD = "Standard"


# Current format: documentation.json

class SymbolDoc(BaseModel):
    """Generated documentation for one graph node."""

    model_config = ConfigDict(extra="allow")

    node_id: str = Field("", description="Graph node this entry documents")
    purpose: str = ""
    explanation: str = ""
    complexity_notes: Optional[str] = None
    usage_hints: Optional[str] = None
    caller_references: List[str] = Field(default_factory=list)
    callee_references: List[str] = Field(default_factory=list)
    semantic_cluster: Optional[str] = None


class ModuleDoc(BaseModel):
    model_config = ConfigDict(extra="allow")

    module_name: str = ""
    responsibilities: str = ""
    key_symbols: List[str] = Field(default_factory=list)
    interactions: str = ""


class ArchitectureDoc(BaseModel):
    model_config = ConfigDict(extra="allow")

    overview: str = ""
    system_behavior: str = ""
    data_flow: str = ""
    key_components: List[str] = Field(default_factory=list)


class Documentation(BaseModel):
    """Contents of ``documentation.json``."""

    model_config = ConfigDict(extra="allow")

    symbol_summaries: Dict[str, SymbolDoc] = Field(default_factory=dict)
    module_overviews: Dict[str, ModuleDoc] = Field(default_factory=dict)
    architecture_overview: ArchitectureDoc = Field(default_factory=ArchitectureDoc)
    total_tokens_used: int = 0


# Current format: metadata.json

class PackageMetadata(BaseModel):
    """Generator provenance and size counts (``metadata.json``)."""

    model_config = ConfigDict(extra="allow")

    version: str = ""
    generator: str = ""
    source: str = ""
    generated_at: Optional[str] = None
    files_included: int = 0
    total_size_bytes: int = 0
    format: str = ""
    contents: Dict[str, str] = Field(default_factory=dict)


# Legacy format: manifest.json, symbols.json, docs/

class LegacyProject(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    version: Optional[str] = None
    repo: Optional[str] = None
    commit: Optional[str] = None


class LegacyManifest(BaseModel):
    """Project identity, stats and visibility flag of a legacy docpack."""

    model_config = ConfigDict(extra="allow")

    docpack_format: int = 1
    project: LegacyProject = Field(default_factory=LegacyProject)
    generated_at: Optional[str] = None
    language_summary: Dict[str, Any] = Field(default_factory=dict)
    stats: Dict[str, Any] = Field(default_factory=dict)
    public: bool = False


class LegacySymbol(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    kind: str = ""
    file: str = ""
    line: int = 0
    signature: Optional[str] = None
    doc_id: Optional[str] = None


class LegacyParameter(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    type: Optional[str] = None
    description: Optional[str] = None


class LegacyDoc(BaseModel):
    model_config = ConfigDict(extra="allow")

    symbol: Optional[str] = Field(None, description="Id of the documented symbol")
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: List[LegacyParameter] = Field(default_factory=list)
    returns: Optional[str] = None
    example: Optional[str] = None
    notes: Union[List[str], str, None] = None


# Edit overlay

class SymbolEdit(BaseModel):
    """User overrides for one symbol's documentation.

    The first four fields target current-format ``SymbolDoc`` entries; the rest
    target legacy symbol and doc records. Unset (None or empty) fields leave the
    generated value in place.
    """

    symbol_id: str = Field(..., min_length=1, description="Graph node id / legacy symbol id")
    purpose: Optional[str] = None
    explanation: Optional[str] = None
    complexity_notes: Optional[str] = None
    usage_hints: Optional[str] = None
    signature: Optional[str] = None
    kind: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: Optional[List[LegacyParameter]] = None
    returns: Optional[str] = None
    example: Optional[str] = None
    notes: Union[List[str], str, None] = None


# Visualization (read-only projections)

class VisualizationNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: str = Field(..., description="Lower-case kind label, e.g. 'function'")
    file: str
    line: int
    fan_in: int
    fan_out: int
    role: VisualizationRole
    importance: float
    is_public: bool
    complexity: Optional[Union[int, float]] = None
    cluster: Optional[str] = Field(None, description="Cluster name for cluster nodes")


class VisualizationEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    kind: Union[EdgeKind, str] = Field(..., union_mode="left_to_right")


class TopSymbol(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    importance: float
    role: VisualizationRole


class VisualizationStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    node_count: int = 0
    edge_count: int = 0
    function_count: int = 0
    type_count: int = 0
    module_count: int = 0
    cluster_count: int = 0
    languages: List[str] = Field(default_factory=list)
    top_symbols: List[TopSymbol] = Field(default_factory=list)


class VisualizationGraph(BaseModel):
    """Role-annotated, importance-ranked graph consumed by the renderer."""

    model_config = ConfigDict(frozen=True)

    nodes: List[VisualizationNode] = Field(default_factory=list)
    edges: List[VisualizationEdge] = Field(default_factory=list)
    stats: VisualizationStats = Field(default_factory=VisualizationStats)


# Combined content

class DocpackContent(BaseModel):
    """Graph, documentation and metadata of a current-format docpack."""

    graph: Graph
    documentation: Documentation
    metadata: PackageMetadata
    tracked_branch: Optional[str] = None

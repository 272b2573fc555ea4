"""Adapter from legacy (manifest/symbols/docs) docpacks to a code graph.

Legacy archives carry a flat symbol list and no relationships, so the graph
produced here has no edges and zero fan-in/fan-out everywhere. It exists so
that legacy docpacks can be fed to the same visualization builder.
"""

import logging
from typing import Dict, Optional

from docpack.core.archive import LegacyArchive
from docpack.core.models import (
    ConstantData,
    FileData,
    FunctionData,
    Graph,
    GraphLocation,
    GraphMetadata,
    GraphNode,
    GraphNodeMetadata,
    KindData,
    MacroData,
    ModuleData,
    PackageData,
    TraitData,
    TypeData,
    TypeKind,
    UnknownKindData,
)
from docpack.core.schemas import LegacyDoc, LegacySymbol

logger = logging.getLogger(__name__)

_TYPE_KINDS: Dict[str, TypeKind] = {
    "struct": TypeKind.STRUCT,
    "class": TypeKind.CLASS,
    "enum": TypeKind.ENUM,
    "interface": TypeKind.INTERFACE,
    "union": TypeKind.UNION,
    "type": TypeKind.STRUCT,
    "type_alias": TypeKind.TYPE_ALIAS,
    "typealias": TypeKind.TYPE_ALIAS,
}

_FUNCTION_KINDS = {"function", "fn", "method"}
_CONSTANT_KINDS = {"const", "constant", "static"}
_MODULE_KINDS = {"module", "mod"}
_PACKAGE_KINDS = {"package", "crate"}

_LANGUAGE_SUFFIX = "_files"


def legacy_to_graph(legacy: LegacyArchive) -> Graph:
    """Build a minimal ``Graph`` from a legacy archive's symbol list."""
    docs_by_id = dict(legacy.docs)
    docs_by_symbol = {doc.symbol: doc for doc in legacy.docs.values() if doc.symbol}

    nodes: Dict[str, GraphNode] = {}
    for symbol in legacy.symbols:
        doc = _find_doc(symbol, docs_by_id, docs_by_symbol)
        nodes[symbol.id] = GraphNode(
            id=symbol.id,
            kind=_symbol_kind(symbol),
            location=GraphLocation(
                file=symbol.file,
                start_line=symbol.line,
                end_line=symbol.line,
            ),
            metadata=GraphNodeMetadata(docstring=doc.summary if doc else None),
        )

    manifest = legacy.manifest
    languages = [
        key[: -len(_LANGUAGE_SUFFIX)] if key.endswith(_LANGUAGE_SUFFIX) else key
        for key in manifest.language_summary
    ]
    metadata = GraphMetadata(
        repository_name=manifest.project.name,
        total_files=len({s.file for s in legacy.symbols if s.file}),
        total_symbols=len(legacy.symbols),
        languages=languages,
        created_at=manifest.generated_at,
    )
    logger.debug(f"Adapted legacy docpack with {len(nodes)} symbols")
    return Graph(nodes=nodes, edges=[], metadata=metadata)


def _find_doc(
    symbol: LegacySymbol,
    docs_by_id: Dict[str, LegacyDoc],
    docs_by_symbol: Dict[str, LegacyDoc],
) -> Optional[LegacyDoc]:
    if symbol.doc_id and symbol.doc_id in docs_by_id:
        return docs_by_id[symbol.doc_id]
    return docs_by_symbol.get(symbol.id)


def _symbol_kind(symbol: LegacySymbol) -> KindData:
    """Map a legacy kind string onto a node kind payload.

    Legacy symbols have no visibility flag; they were documented because they
    were exported, so they are treated as public.
    """
    kind = symbol.kind.strip().lower()
    name = symbol.id.rsplit("::", 1)[-1].rsplit(".", 1)[-1].rsplit("/", 1)[-1]

    if kind in _FUNCTION_KINDS:
        return FunctionData(
            name=name,
            signature=symbol.signature or "",
            is_public=True,
            is_method=kind == "method",
        )
    if kind in _TYPE_KINDS:
        return TypeData(name=name, kind=_TYPE_KINDS[kind], is_public=True)
    if kind == "trait":
        return TraitData(name=name, is_public=True)
    if kind in _MODULE_KINDS:
        return ModuleData(name=name, path=symbol.file, is_public=True)
    if kind in _CONSTANT_KINDS:
        return ConstantData(name=name, is_public=True)
    if kind == "file":
        return FileData(path=symbol.file or symbol.id)
    if kind in _PACKAGE_KINDS:
        return PackageData(name=name)
    if kind == "macro":
        return MacroData(name=name, is_public=True)
    return UnknownKindData(unknown_tag=symbol.kind, raw={symbol.kind: {"name": name}})

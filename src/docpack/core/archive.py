"""Docpack archive codec.

A docpack is a ZIP container of JSON members in one of two shapes:

- current: ``graph.json``, ``documentation.json``, ``metadata.json``
- legacy:  ``manifest.json``, ``symbols.json`` and a docs collection, either
  one ``docs/<doc_id>.json`` member per document or a bundled ``docs.json``
  array

``decode`` detects the shape and loads the members into pydantic models;
``encode`` writes an archive back. Members the codec does not recognise are
carried through byte-for-byte, and unrecognised keys inside recognised records
are kept by the models.
"""

import io
import json
import logging
import math
import zipfile
import zlib
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from docpack.core.models import Graph, UnknownKindData
from docpack.core.schemas import (
    Documentation,
    LegacyDoc,
    LegacyManifest,
    LegacySymbol,
    PackageMetadata,
)

logger = logging.getLogger(__name__)

GRAPH_MEMBER = "graph.json"
DOCUMENTATION_MEMBER = "documentation.json"
METADATA_MEMBER = "metadata.json"
MANIFEST_MEMBER = "manifest.json"
SYMBOLS_MEMBER = "symbols.json"
DOCS_BUNDLE_MEMBER = "docs.json"
DOCS_PREFIX = "docs/"

DEFAULT_JSON_INDENT = 2

# Fixed timestamp so that encoding the same archive twice yields the same bytes
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


# ============================================================================
# Errors
# ============================================================================

class DecodeError(Exception):
    """Raised when archive bytes cannot be decoded."""

    def __init__(self, message: str, member: Optional[str] = None):
        super().__init__(message)
        self.member = member


class MalformedArchive(DecodeError):
    """A required member is missing, unreadable, or has the wrong JSON shape."""
    pass


class UnknownShape(DecodeError):
    """Neither the current nor the legacy member set is present."""
    pass


# ============================================================================
# Archive models
# ============================================================================

class ArchiveShape(str, Enum):
    CURRENT = "current"
    LEGACY = "legacy"


class DocsLayout(str, Enum):
    """How a legacy archive stores its documents."""
    DIRECTORY = "directory"  # docs/<doc_id>.json
    BUNDLE = "bundle"  # docs.json array


class CurrentArchive(BaseModel):
    shape: ClassVar[ArchiveShape] = ArchiveShape.CURRENT

    graph: Graph = Field(default_factory=Graph)
    documentation: Documentation = Field(default_factory=Documentation)
    metadata: PackageMetadata = Field(default_factory=PackageMetadata)
    tracked_branch: Optional[str] = None
    extra_members: Dict[str, bytes] = Field(
        default_factory=dict, description="Unrecognised members, kept verbatim"
    )


class LegacyArchive(BaseModel):
    shape: ClassVar[ArchiveShape] = ArchiveShape.LEGACY

    manifest: LegacyManifest = Field(default_factory=LegacyManifest)
    symbols: List[LegacySymbol] = Field(default_factory=list)
    docs: Dict[str, LegacyDoc] = Field(default_factory=dict, description="Document id -> record")
    docs_layout: DocsLayout = DocsLayout.DIRECTORY
    tracked_branch: Optional[str] = None
    extra_members: Dict[str, bytes] = Field(default_factory=dict)


Archive = Union[CurrentArchive, LegacyArchive]


# ============================================================================
# Decoding
# ============================================================================

def detect_shape(member_names) -> ArchiveShape:
    """Pick the archive shape from the member names.

    ``graph.json`` wins; otherwise ``manifest.json`` marks a legacy archive.
    """
    names = set(member_names)
    if GRAPH_MEMBER in names:
        return ArchiveShape.CURRENT
    if MANIFEST_MEMBER in names:
        return ArchiveShape.LEGACY
    raise UnknownShape(
        f"Archive has neither {GRAPH_MEMBER} nor {MANIFEST_MEMBER}"
    )


def read_members(data: bytes, max_bytes: Optional[int] = None) -> Dict[str, bytes]:
    """Read every file member of a ZIP archive into memory.

    ``max_bytes`` caps both the archive itself and the declared uncompressed
    size of its members.
    """
    if max_bytes is not None and len(data) > max_bytes:
        raise MalformedArchive(
            f"Archive is {len(data)} bytes, larger than the {max_bytes} byte limit"
        )
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            infos = [info for info in zf.infolist() if not info.is_dir()]
            if max_bytes is not None:
                expanded = sum(info.file_size for info in infos)
                if expanded > max_bytes:
                    raise MalformedArchive(
                        f"Archive expands to {expanded} bytes, larger than the "
                        f"{max_bytes} byte limit"
                    )
            return {info.filename: zf.read(info) for info in infos}
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        EOFError,
        OSError,
        RuntimeError,
        NotImplementedError,
    ) as e:
        # RuntimeError: encrypted member; NotImplementedError: unsupported compression
        raise MalformedArchive(f"Archive is not a readable ZIP container: {e}") from e


def decode(
    data: bytes,
    tracked_branch: Optional[str] = None,
    max_bytes: Optional[int] = None,
) -> Archive:
    """Decode archive bytes into a ``CurrentArchive`` or ``LegacyArchive``.

    Args:
        data: Raw archive bytes
        tracked_branch: Branch recorded by the owning docpack record, if any
        max_bytes: Reject archives larger than this

    Raises:
        MalformedArchive: Unreadable container, or a required member is missing
            or has the wrong JSON shape
        UnknownShape: Neither member set is present
    """
    members = read_members(data, max_bytes=max_bytes)
    shape = detect_shape(members)
    logger.debug(f"Detected {shape.value} docpack with {len(members)} members")

    if shape is ArchiveShape.CURRENT:
        return _decode_current(members, tracked_branch)
    return _decode_legacy(members, tracked_branch)


def _decode_current(members: Dict[str, bytes], tracked_branch: Optional[str]) -> CurrentArchive:
    graph = _validate(Graph, _load_json(members, GRAPH_MEMBER, dict), GRAPH_MEMBER)
    documentation = _validate(
        Documentation, _load_json(members, DOCUMENTATION_MEMBER, dict), DOCUMENTATION_MEMBER
    )
    metadata = _validate(
        PackageMetadata, _load_json(members, METADATA_MEMBER, dict), METADATA_MEMBER
    )
    _warn_unknown_kinds(graph)

    known = {GRAPH_MEMBER, DOCUMENTATION_MEMBER, METADATA_MEMBER}
    return CurrentArchive(
        graph=graph,
        documentation=documentation,
        metadata=metadata,
        tracked_branch=tracked_branch,
        extra_members=_extra_members(members, known),
    )


def _decode_legacy(members: Dict[str, bytes], tracked_branch: Optional[str]) -> LegacyArchive:
    manifest = _validate(LegacyManifest, _load_json(members, MANIFEST_MEMBER, dict), MANIFEST_MEMBER)
    raw_symbols = _load_json(members, SYMBOLS_MEMBER, list)
    symbols = [_validate(LegacySymbol, item, SYMBOLS_MEMBER) for item in raw_symbols]

    known = {MANIFEST_MEMBER, SYMBOLS_MEMBER}
    docs: Dict[str, LegacyDoc] = {}
    doc_members = sorted(
        name for name in members
        if name.startswith(DOCS_PREFIX) and name.endswith(".json")
    )

    if doc_members or DOCS_BUNDLE_MEMBER not in members:
        layout = DocsLayout.DIRECTORY
        for name in doc_members:
            doc_id = name[len(DOCS_PREFIX):-len(".json")]
            docs[doc_id] = _validate(LegacyDoc, _load_json(members, name, dict), name)
            known.add(name)
    else:
        layout = DocsLayout.BUNDLE
        raw_docs = _load_json(members, DOCS_BUNDLE_MEMBER, list)
        for index, item in enumerate(raw_docs):
            docs[f"doc_{index}"] = _validate(LegacyDoc, item, DOCS_BUNDLE_MEMBER)
        known.add(DOCS_BUNDLE_MEMBER)

    return LegacyArchive(
        manifest=manifest,
        symbols=symbols,
        docs=docs,
        docs_layout=layout,
        tracked_branch=tracked_branch,
        extra_members=_extra_members(members, known),
    )


def _load_json(members: Dict[str, bytes], name: str, expected: type) -> Any:
    if name not in members:
        raise MalformedArchive(f"Required member {name} is missing", member=name)
    try:
        value = json.loads(
            members[name].decode("utf-8"),
            parse_constant=_reject_constant,
            parse_float=_finite_float,
        )
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedArchive(f"Member {name} is not valid JSON: {e}", member=name) from e
    if not isinstance(value, expected):
        wanted = "object" if expected is dict else "array"
        raise MalformedArchive(
            f"Member {name} must be a JSON {wanted}, got {type(value).__name__}",
            member=name,
        )
    return value


def _reject_constant(token: str):
    raise ValueError(f"{token} is not a JSON value")


def _finite_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"{token} overflows a finite number")
    return value


def _validate(model: type, value: Any, member: str):
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise MalformedArchive(
            f"Member {member} does not match the {model.__name__} schema: {e}",
            member=member,
        ) from e


def _extra_members(members: Dict[str, bytes], known: set) -> Dict[str, bytes]:
    extra = {name: body for name, body in members.items() if name not in known}
    if extra:
        logger.debug(f"Keeping {len(extra)} unrecognised members: {sorted(extra)}")
    return extra


def _warn_unknown_kinds(graph: Graph) -> None:
    counts: Dict[str, int] = {}
    for node in graph.nodes.values():
        if isinstance(node.kind, UnknownKindData):
            tag = node.kind.unknown_tag or "<untagged>"
            counts[tag] = counts.get(tag, 0) + 1
    for tag, count in counts.items():
        logger.warning(f"Graph has {count} node(s) of unrecognised kind {tag!r}")


# ============================================================================
# Encoding
# ============================================================================

def encode(archive: Archive, indent: Optional[int] = DEFAULT_JSON_INDENT) -> bytes:
    """Serialize an archive back into ZIP bytes.

    ``tracked_branch`` is not an archive member and is not written.
    """
    members: List[tuple] = []

    if isinstance(archive, CurrentArchive):
        members.append((GRAPH_MEMBER, archive.graph.model_dump(mode="json")))
        members.append((DOCUMENTATION_MEMBER, archive.documentation.model_dump(mode="json")))
        members.append((METADATA_MEMBER, archive.metadata.model_dump(mode="json")))
    else:
        members.append((MANIFEST_MEMBER, archive.manifest.model_dump(mode="json")))
        members.append((SYMBOLS_MEMBER, [s.model_dump(mode="json") for s in archive.symbols]))
        if archive.docs_layout is DocsLayout.BUNDLE:
            members.append((
                DOCS_BUNDLE_MEMBER,
                [doc.model_dump(mode="json") for doc in archive.docs.values()],
            ))
        else:
            for doc_id, doc in archive.docs.items():
                members.append((f"{DOCS_PREFIX}{doc_id}.json", doc.model_dump(mode="json")))

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, payload in members:
            text = json.dumps(payload, indent=indent, ensure_ascii=False)
            _write_member(zf, name, text.encode("utf-8"))
        for name in sorted(archive.extra_members):
            _write_member(zf, name, archive.extra_members[name])
    return buffer.getvalue()


def _write_member(zf: zipfile.ZipFile, name: str, body: bytes) -> None:
    info = zipfile.ZipInfo(name, date_time=_ZIP_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    zf.writestr(info, body)

"""Shared fixtures: sample docpack members and in-memory archive builders."""

import io
import json
import zipfile
from typing import Any, Dict, Optional

import pytest

from docpack import config as config_module
from docpack.core.models import GraphNode


def build_zip(members: Dict[str, Any]) -> bytes:
    """ZIP the given members; dicts/lists are JSON-encoded, bytes written as-is."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, value in members.items():
            if isinstance(value, (bytes, bytearray)):
                zf.writestr(name, bytes(value))
            elif isinstance(value, str):
                zf.writestr(name, value)
            else:
                zf.writestr(name, json.dumps(value))
    return buffer.getvalue()


def node_dict(
    node_id: str,
    tag: str,
    payload: Optional[Dict[str, Any]] = None,
    fan_in: int = 0,
    fan_out: int = 0,
    complexity: Optional[float] = None,
    is_public_api: bool = False,
    file: str = "src/lib.rs",
    line: int = 1,
) -> Dict[str, Any]:
    return {
        "id": node_id,
        "kind": {tag: payload if payload is not None else {"name": node_id}},
        "location": {
            "file": file,
            "start_line": line,
            "end_line": line + 5,
            "start_col": 0,
            "end_col": 1,
        },
        "metadata": {
            "complexity": complexity,
            "fan_in": fan_in,
            "fan_out": fan_out,
            "is_public_api": is_public_api,
            "docstring": None,
            "tags": [],
            "source_snippet": None,
        },
    }


@pytest.fixture(autouse=True)
def restore_settings_cache():
    """Ensure cached settings do not leak between tests."""
    config_module.reload_settings()
    yield
    config_module.reload_settings()


@pytest.fixture
def make_archive():
    return build_zip


@pytest.fixture
def make_node():
    """Factory for GraphNode models built from wire-format dicts."""
    def _make(node_id: str = "n1", tag: str = "Function", payload=None, **kwargs) -> GraphNode:
        return GraphNode.model_validate(node_dict(node_id, tag, payload, **kwargs))
    return _make


@pytest.fixture
def graph_dict() -> Dict[str, Any]:
    nodes = [
        node_dict(
            "fn:parse", "Function",
            {
                "name": "parse",
                "signature": "pub fn parse(input: &str) -> Result<Ast>",
                "is_public": True,
                "is_async": False,
                "is_method": False,
                "parameters": [{"name": "input", "param_type": "&str", "is_mutable": False}],
                "return_type": "Result<Ast>",
            },
            fan_in=10, fan_out=2, complexity=30, is_public_api=True, line=10,
        ),
        node_dict(
            "type:Config", "Type",
            {
                "name": "Config",
                "kind": "Struct",
                "is_public": True,
                "fields": [{"name": "verbose", "field_type": "bool", "is_public": True}],
                "methods": ["fn:parse"],
            },
            fan_in=8, line=40,
        ),
        node_dict(
            "mod:core", "Module",
            {"name": "core", "path": "src/core", "is_public": True, "children": ["fn:parse"]},
            fan_out=7, file="src/core/mod.rs",
        ),
        node_dict(
            "fn:helper", "Function",
            {"name": "helper", "signature": "fn helper()", "is_public": False,
             "is_async": False, "is_method": False, "parameters": [], "return_type": None},
            fan_in=1, fan_out=1, line=80,
        ),
        node_dict(
            "cluster:io", "Cluster",
            {"name": "io", "topic": "Input/output", "members": ["fn:parse"],
             "keywords": ["read", "write"], "centroid": [0.1, 0.2]},
            file="",
        ),
        node_dict(
            "file:main", "File",
            {"path": "src/main.rs", "language": "rust", "size_bytes": 120,
             "line_count": 10, "symbols": []},
            file="src/main.rs",
        ),
    ]
    return {
        "nodes": {n["id"]: n for n in nodes},
        "edges": [
            {"source": "fn:helper", "target": "fn:parse", "kind": "Calls"},
            {"source": "mod:core", "target": "fn:parse", "kind": "ModuleOwnership"},
            {"source": "fn:parse", "target": "ext:serde", "kind": "TypeReference"},
        ],
        "metadata": {
            "repository_name": "acme/widget",
            "total_files": 3,
            "total_symbols": 6,
            "languages": ["rust"],
            "created_at": "2025-01-01T00:00:00Z",
        },
    }


@pytest.fixture
def documentation_dict() -> Dict[str, Any]:
    return {
        "symbol_summaries": {
            "fn:parse": {
                "node_id": "fn:parse",
                "purpose": "Parse source text",
                "explanation": "Tokenizes and builds an AST.",
                "complexity_notes": None,
                "usage_hints": "Call once per file.",
                "caller_references": ["fn:helper"],
                "callee_references": [],
                "semantic_cluster": "io",
            }
        },
        "module_overviews": {
            "core": {
                "module_name": "core",
                "responsibilities": "Parsing",
                "key_symbols": ["fn:parse"],
                "interactions": "Used by the CLI",
            }
        },
        "architecture_overview": {
            "overview": "A small parser.",
            "system_behavior": "Reads files, emits ASTs.",
            "data_flow": "file -> tokens -> ast",
            "key_components": ["core"],
        },
        "total_tokens_used": 1234,
    }


@pytest.fixture
def metadata_dict() -> Dict[str, Any]:
    return {
        "version": "2.0.0",
        "generator": "doctown-builder",
        "source": "https://github.com/acme/widget",
        "generated_at": "2025-01-01T00:00:00Z",
        "files_included": 3,
        "total_size_bytes": 2048,
        "format": "docpack",
        "contents": {"graph.json": "Code graph"},
    }


@pytest.fixture
def current_members(graph_dict, documentation_dict, metadata_dict) -> Dict[str, Any]:
    return {
        "graph.json": graph_dict,
        "documentation.json": documentation_dict,
        "metadata.json": metadata_dict,
    }


@pytest.fixture
def current_archive_bytes(current_members) -> bytes:
    return build_zip(current_members)


@pytest.fixture
def legacy_members() -> Dict[str, Any]:
    return {
        "manifest.json": {
            "docpack_format": 1,
            "project": {
                "name": "widget",
                "version": "1.0.0",
                "repo": "acme/widget",
                "commit": "abc12345",
            },
            "generated_at": "2024-06-01T12:00:00Z",
            "language_summary": {"rust_files": 2},
            "stats": {"symbols_extracted": 3, "docs_generated": 1},
            "public": True,
        },
        "symbols.json": [
            {"id": "widget::parse", "kind": "function", "file": "src/lib.rs", "line": 10,
             "signature": "fn parse(input: &str)", "doc_id": "doc_1"},
            {"id": "widget::Config", "kind": "struct", "file": "src/config.rs", "line": 3,
             "signature": "struct Config", "doc_id": None},
            {"id": "blog/hello", "kind": "article", "file": "blog/hello.md", "line": 1,
             "signature": "2024-06-01 | 3 min read", "doc_id": "blog/hello"},
        ],
        "docs/doc_1.json": {
            "symbol": "widget::parse",
            "summary": "Parses input",
            "description": "Turns text into an AST.",
            "parameters": [{"name": "input", "type": "&str", "description": "Source text"}],
            "returns": "Ast",
            "example": "parse(\"x\")",
            "notes": ["Pure function"],
        },
    }


@pytest.fixture
def legacy_archive_bytes(legacy_members) -> bytes:
    return build_zip(legacy_members)

"""Tests for applying symbol edits to decoded archives."""

import io
import json
import zipfile

from docpack.core.archive import decode, encode
from docpack.core.edits import apply_symbol_edits
from docpack.core.schemas import SymbolEdit


def _members(data: bytes):
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


class TestCurrentFormat:
    def test_overrides_symbol_doc(self, current_archive_bytes):
        archive = decode(current_archive_bytes)
        edited, applied = apply_symbol_edits(archive, [
            SymbolEdit(symbol_id="fn:parse", purpose="Parse a config file", usage_hints=""),
        ])
        assert applied == 1
        doc = edited.documentation.symbol_summaries["fn:parse"]
        assert doc.purpose == "Parse a config file"
        assert doc.explanation == "Tokenizes and builds an AST."
        assert doc.usage_hints == "Call once per file."

    def test_input_not_mutated(self, current_archive_bytes):
        archive = decode(current_archive_bytes)
        apply_symbol_edits(archive, [SymbolEdit(symbol_id="fn:parse", purpose="changed")])
        assert archive.documentation.symbol_summaries["fn:parse"].purpose == "Parse source text"

    def test_unknown_symbol_ignored(self, current_archive_bytes):
        archive = decode(current_archive_bytes)
        edited, applied = apply_symbol_edits(archive, [SymbolEdit(symbol_id="nope", purpose="x")])
        assert edited == archive
        assert applied == 0

    def test_other_members_untouched_after_reencode(self, make_archive, current_members):
        current_members["notes.txt"] = b"keep me"
        original = encode(decode(make_archive(current_members)))
        edited_archive, _ = apply_symbol_edits(
            decode(original), [SymbolEdit(symbol_id="fn:parse", explanation="New text")]
        )
        edited = encode(edited_archive)
        before, after = _members(original), _members(edited)
        assert before["graph.json"] == after["graph.json"]
        assert before["metadata.json"] == after["metadata.json"]
        assert after["notes.txt"] == b"keep me"
        docs = json.loads(after["documentation.json"])
        assert docs["symbol_summaries"]["fn:parse"]["explanation"] == "New text"


class TestLegacyFormat:
    def test_symbol_and_doc_updated(self, legacy_archive_bytes):
        archive = decode(legacy_archive_bytes)
        edited, _ = apply_symbol_edits(archive, [
            SymbolEdit(
                symbol_id="widget::parse",
                signature="fn parse(input: &str) -> Ast",
                summary="Parses widget input",
                parameters=[{"name": "input", "type": "&str", "description": "Widget source"}],
                notes=["Edited"],
            ),
        ])
        symbol = next(s for s in edited.symbols if s.id == "widget::parse")
        assert symbol.signature == "fn parse(input: &str) -> Ast"
        assert symbol.kind == "function"

        doc = edited.docs["doc_1"]
        assert doc.summary == "Parses widget input"
        assert doc.description == "Turns text into an AST."
        assert doc.parameters[0].description == "Widget source"
        assert doc.notes == ["Edited"]

    def test_layout_preserved(self, make_archive, legacy_members):
        legacy_members["docs.json"] = [legacy_members.pop("docs/doc_1.json")]
        archive = decode(make_archive(legacy_members))
        edited, _ = apply_symbol_edits(archive, [SymbolEdit(symbol_id="widget::parse", summary="S")])
        assert edited.docs_layout == archive.docs_layout
        assert edited.docs["doc_0"].summary == "S"

    def test_empty_list_clears_parameters_and_notes(self, legacy_archive_bytes):
        archive = decode(legacy_archive_bytes)
        edited, applied = apply_symbol_edits(archive, [
            SymbolEdit(symbol_id="widget::parse", parameters=[], notes=[], summary=""),
        ])
        assert applied == 1
        doc = edited.docs["doc_1"]
        assert doc.parameters == []
        assert doc.notes == []
        assert doc.summary == "Parses input"

    def test_unset_lists_left_alone(self, legacy_archive_bytes):
        archive = decode(legacy_archive_bytes)
        edited, _ = apply_symbol_edits(archive, [SymbolEdit(symbol_id="widget::parse", returns="Tree")])
        doc = edited.docs["doc_1"]
        assert doc.returns == "Tree"
        assert doc.parameters[0].name == "input"
        assert doc.notes == ["Pure function"]

    def test_applied_counts_only_known_symbols(self, legacy_archive_bytes):
        archive = decode(legacy_archive_bytes)
        _, applied = apply_symbol_edits(archive, [
            SymbolEdit(symbol_id="widget::parse", summary="S"),
            SymbolEdit(symbol_id="widget::Config", signature="pub struct Config"),
            SymbolEdit(symbol_id="widget::missing", summary="never lands"),
        ])
        assert applied == 2

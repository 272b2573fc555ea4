"""Apply user symbol edits to a decoded archive."""

import logging
from typing import Iterable, Tuple

from docpack.core.archive import Archive, CurrentArchive, LegacyArchive
from docpack.core.schemas import LegacyDoc, LegacySymbol, SymbolDoc, SymbolEdit

logger = logging.getLogger(__name__)

SYMBOL_DOC_FIELDS = ("purpose", "explanation", "complexity_notes", "usage_hints")
LEGACY_SYMBOL_FIELDS = ("signature", "kind")
LEGACY_DOC_FIELDS = ("summary", "description", "parameters", "returns", "example", "notes")


def apply_symbol_edits(
    archive: Archive, edits: Iterable[SymbolEdit]
) -> Tuple[Archive, int]:
    """Merge edits into a copy of ``archive``.

    Returns the edited copy and the number of edits that matched a symbol the
    archive documents. Edits for unknown symbols are skipped and the input
    archive is not modified.

    String overrides apply when non-empty. List overrides (``parameters``,
    list-valued ``notes``) apply whenever they are set, so ``[]`` clears the
    generated list.
    """
    edits_by_symbol = {edit.symbol_id: edit for edit in edits}
    result = archive.model_copy(deep=True)

    if isinstance(result, CurrentArchive):
        applied = _apply_current(result, edits_by_symbol)
    else:
        applied = _apply_legacy(result, edits_by_symbol)

    logger.debug(f"Applied {applied} of {len(edits_by_symbol)} symbol edits")
    return result, applied


def _apply_current(archive: CurrentArchive, edits_by_symbol: dict) -> int:
    summaries = archive.documentation.symbol_summaries
    applied = 0
    for symbol_id, edit in edits_by_symbol.items():
        doc = summaries.get(symbol_id)
        if doc is None:
            continue
        summaries[symbol_id] = _merge(SymbolDoc, doc, edit, SYMBOL_DOC_FIELDS)
        applied += 1
    return applied


def _apply_legacy(archive: LegacyArchive, edits_by_symbol: dict) -> int:
    touched = set()

    for index, symbol in enumerate(archive.symbols):
        edit = edits_by_symbol.get(symbol.id)
        if edit is not None:
            archive.symbols[index] = _merge(LegacySymbol, symbol, edit, LEGACY_SYMBOL_FIELDS)
            touched.add(symbol.id)

    for doc_id, doc in list(archive.docs.items()):
        edit = edits_by_symbol.get(doc.symbol) if doc.symbol else None
        if edit is not None:
            archive.docs[doc_id] = _merge(LegacyDoc, doc, edit, LEGACY_DOC_FIELDS)
            touched.add(doc.symbol)

    return len(touched)


def _merge(model: type, record, edit: SymbolEdit, fields):
    updates = {}
    for field in fields:
        value = getattr(edit, field)
        if value is None or value == "":
            continue
        updates[field] = value
    if not updates:
        return record
    if "parameters" in updates:
        updates["parameters"] = [p.model_dump() for p in updates["parameters"]]
    return model.model_validate({**record.model_dump(), **updates})

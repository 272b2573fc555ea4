"""Tests for DocpackService."""

import pytest

from docpack.config import Settings
from docpack.core.archive import CurrentArchive, LegacyArchive, MalformedArchive, decode
from docpack.core.schemas import JobStatus, SymbolEdit
from docpack.core.service import ArchiveNotReady, DocpackService


@pytest.fixture
def service() -> DocpackService:
    return DocpackService(Settings())


def test_load_current(service, current_archive_bytes):
    archive = service.load(current_archive_bytes, tracked_branch="main")
    assert isinstance(archive, CurrentArchive)
    assert archive.tracked_branch == "main"


@pytest.mark.parametrize("status", [JobStatus.PENDING, JobStatus.BUILDING, JobStatus.FAILED])
def test_load_requires_completed_job(service, current_archive_bytes, status):
    with pytest.raises(ArchiveNotReady) as exc_info:
        service.load(current_archive_bytes, job_status=status)
    assert exc_info.value.status is status


def test_load_respects_size_limit(current_archive_bytes):
    service = DocpackService(Settings(max_archive_bytes=16))
    with pytest.raises(MalformedArchive):
        service.load(current_archive_bytes)


def test_content(service, current_archive_bytes):
    content = service.content(service.load(current_archive_bytes, tracked_branch="dev"))
    assert content.tracked_branch == "dev"
    assert content.graph.metadata.repository_name == "acme/widget"
    assert content.metadata.format == "docpack"
    dumped = content.model_dump(mode="json")
    assert dumped["graph"]["nodes"]["fn:parse"]["kind"]["Function"]["name"] == "parse"


def test_content_rejects_legacy(service, legacy_archive_bytes):
    with pytest.raises(ValueError):
        service.content(service.load(legacy_archive_bytes))


def test_visualize_current(service, current_archive_bytes):
    view = service.visualize(service.load(current_archive_bytes))
    assert view.stats.node_count == 6


def test_visualize_legacy(service, legacy_archive_bytes):
    archive = service.load(legacy_archive_bytes)
    assert isinstance(archive, LegacyArchive)
    view = service.visualize(archive)
    assert view.stats.node_count == 3
    assert view.stats.edge_count == 0


def test_export_with_edits(service, current_archive_bytes):
    archive = service.load(current_archive_bytes)
    data, applied = service.export_with_edits(archive, [
        SymbolEdit(symbol_id="fn:parse", purpose="Edited"),
        SymbolEdit(symbol_id="fn:gone", purpose="Dropped"),
    ])
    assert applied == 1
    reloaded = decode(data)
    assert reloaded.documentation.symbol_summaries["fn:parse"].purpose == "Edited"
    assert reloaded.graph == archive.graph


def test_export_requires_edits(service, current_archive_bytes):
    with pytest.raises(ValueError, match="No edits"):
        service.export_with_edits(service.load(current_archive_bytes), [])

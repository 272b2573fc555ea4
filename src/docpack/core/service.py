"""Docpack service: decode, project, visualize and re-export archives.

Archive bytes come from an external storage fetcher and callers are assumed to
have passed access control already. This service only guards on the build job
having completed.
"""

import logging
from typing import List, Optional, Tuple

from docpack.config import Settings, get_settings
from docpack.core.archive import Archive, CurrentArchive, decode, encode
from docpack.core.edits import apply_symbol_edits
from docpack.core.legacy import legacy_to_graph
from docpack.core.models import Graph
from docpack.core.schemas import DocpackContent, JobStatus, SymbolEdit, VisualizationGraph
from docpack.core.visualization import build_visualization

logger = logging.getLogger(__name__)


class ArchiveNotReady(Exception):
    """Raised when an archive is requested before its build job completed."""

    def __init__(self, status: JobStatus):
        super().__init__(f"Docpack build is {status.value}; archive is not available yet")
        self.status = status


class DocpackService:
    """Entry point for everything the rest of the product asks of a docpack."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def load(
        self,
        data: bytes,
        tracked_branch: Optional[str] = None,
        job_status: JobStatus = JobStatus.COMPLETED,
    ) -> Archive:
        """Decode archive bytes for a completed build.

        Raises:
            ArchiveNotReady: The job has not reached ``completed``
            MalformedArchive: Bad container or member
            UnknownShape: Unrecognised member set
        """
        if job_status is not JobStatus.COMPLETED:
            raise ArchiveNotReady(job_status)
        archive = decode(data, tracked_branch=tracked_branch, max_bytes=self.settings.max_archive_bytes)
        logger.info(f"Loaded {archive.shape.value} docpack ({len(data)} bytes)")
        return archive

    def content(self, archive: Archive) -> DocpackContent:
        if not isinstance(archive, CurrentArchive):
            raise ValueError("Content view is only available for current-format docpacks")
        return DocpackContent(
            graph=archive.graph,
            documentation=archive.documentation,
            metadata=archive.metadata,
            tracked_branch=archive.tracked_branch,
        )

    def graph(self, archive: Archive) -> Graph:
        """The archive's code graph, adapting legacy symbol lists when needed."""
        if isinstance(archive, CurrentArchive):
            return archive.graph
        return legacy_to_graph(archive)

    def visualize(self, archive: Archive) -> VisualizationGraph:
        return build_visualization(self.graph(archive))

    def export_with_edits(
        self, archive: Archive, edits: List[SymbolEdit]
    ) -> Tuple[bytes, int]:
        """Merge edits into the archive and encode the result.

        Returns the archive bytes and the number of edits that matched a
        documented symbol.
        """
        if not edits:
            raise ValueError("No edits to export")
        edited, applied = apply_symbol_edits(archive, edits)
        data = encode(edited, indent=self.settings.json_indent)
        logger.info(
            f"Exported {archive.shape.value} docpack with {applied} of {len(edits)} edits "
            f"applied ({len(data)} bytes)"
        )
        return data, applied

import base64
import binascii
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ...config import get_settings
from ...core.schemas import DocpackContent, JobStatus, SymbolEdit, VisualizationGraph
from ...core.service import DocpackService

router = APIRouter()


class ExportRequest(BaseModel):
    """Archive plus the edits to merge into it."""
    archive_base64: str = Field(..., description="Base64-encoded .docpack bytes")
    edits: List[SymbolEdit] = Field(..., description="Symbol edits to apply")


def get_docpack_service() -> DocpackService:
    return DocpackService(get_settings())


async def _read_archive(request: Request, service: DocpackService) -> bytes:
    data = await request.body()
    if len(data) > service.settings.max_archive_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Archive exceeds {service.settings.max_archive_bytes} bytes",
        )
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty request body")
    return data


@router.post("/api/docpacks/content", response_model=DocpackContent)
async def get_docpack_content(
    request: Request,
    service: Annotated[DocpackService, Depends(get_docpack_service)],
    tracked_branch: Optional[str] = Query(None, description="Branch tracked by the docpack"),
    job_status: JobStatus = Query(JobStatus.COMPLETED, description="Status of the build job"),
) -> DocpackContent:
    """Extract graph, documentation and metadata from a docpack archive."""
    data = await _read_archive(request, service)
    archive = service.load(data, tracked_branch=tracked_branch, job_status=job_status)
    try:
        return service.content(archive)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(e))


@router.post("/api/docpacks/visualization", response_model=VisualizationGraph)
async def get_docpack_visualization(
    request: Request,
    service: Annotated[DocpackService, Depends(get_docpack_service)],
    job_status: JobStatus = Query(JobStatus.COMPLETED, description="Status of the build job"),
) -> VisualizationGraph:
    """Build the visualization graph for a docpack archive."""
    data = await _read_archive(request, service)
    archive = service.load(data, job_status=job_status)
    return service.visualize(archive)


@router.post("/api/docpacks/export")
async def export_docpack(
    payload: ExportRequest,
    service: Annotated[DocpackService, Depends(get_docpack_service)],
) -> Response:
    """Return a new docpack with the given edits applied."""
    try:
        data = base64.b64decode(payload.archive_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="archive_base64 is not valid base64")

    archive = service.load(data)
    try:
        edited, applied = service.export_with_edits(archive, payload.edits)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return Response(
        content=edited,
        media_type="application/zip",
        headers={"X-Edits-Applied": str(applied)},
    )

# =============================================================================
# File API Routes
# =============================================================================
#
# Endpoints (all require a bearer access token):
#   POST   /projects/{id}/files - Upload files (multipart field "files")
#   GET    /projects/{id}/files - List files + stats (cached)
#   GET    /files/stats         - Caller's upload stats
#   GET    /files/{id}          - Get file metadata
#   DELETE /files/{id}          - Delete file
#
# =============================================================================

from fastapi import APIRouter, Depends, File, Request, UploadFile
from pydantic import BaseModel

from taskify.api.cache import cached_json, invalidate_projects
from taskify.auth.context import Identity
from taskify.auth.middleware import require_identity
from taskify.core.models import FileStats, StoredFile
from taskify.services.files import FileService, Upload

router = APIRouter(tags=["files"])


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


async def read_upload(file: UploadFile, limit: int) -> Upload:
    """
    Buffer one part, reading at most `limit + 1` bytes.

    An oversize part is cut at one byte past the limit, which is enough for
    the size check to reject it.
    """
    return Upload(
        filename=file.filename or "upload",
        content_type=file.content_type or "application/octet-stream",
        data=await file.read(limit + 1),
    )


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    data: list[StoredFile]


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


@router.post("/projects/{project_id}/files", response_model=UploadResponse, status_code=201)
async def upload_files(
    project_id: str,
    request: Request,
    files: list[UploadFile] = File(...),
    identity: Identity = Depends(require_identity),
    service: FileService = Depends(get_file_service),
):
    service.validate_count(len(files))
    uploads = [await read_upload(f, service.max_file_size) for f in files]
    stored = await service.upload(project_id, identity, uploads)
    await invalidate_projects(request)
    return UploadResponse(message=f"{len(stored)} file(s) uploaded successfully", data=stored)


@router.get("/projects/{project_id}/files")
async def list_project_files(
    project_id: str,
    request: Request,
    identity: Identity = Depends(require_identity),
    service: FileService = Depends(get_file_service),
):
    return await cached_json(request, identity, lambda: service.list_for_project(project_id, identity))


# Registered before /files/{file_id} so "stats" is not read as an id
@router.get("/files/stats", response_model=FileStats)
async def user_file_stats(
    identity: Identity = Depends(require_identity),
    service: FileService = Depends(get_file_service),
):
    return await service.user_stats(identity)


@router.get("/files/{file_id}", response_model=StoredFile)
async def get_file(
    file_id: str,
    identity: Identity = Depends(require_identity),
    service: FileService = Depends(get_file_service),
):
    return await service.get(file_id, identity)


@router.delete("/files/{file_id}", response_model=DeleteResponse)
async def delete_file(
    file_id: str,
    request: Request,
    identity: Identity = Depends(require_identity),
    service: FileService = Depends(get_file_service),
):
    await service.delete(file_id, identity)
    await invalidate_projects(request)
    return DeleteResponse(message="File deleted successfully")

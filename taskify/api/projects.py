# =============================================================================
# Project API Routes
# =============================================================================
#
# Endpoints (all require a bearer access token):
#   POST   /projects       - Create project
#   GET    /projects       - List caller's projects (cached)
#   GET    /projects/{id}  - Get project (cached)
#   PUT    /projects/{id}  - Update project
#   DELETE /projects/{id}  - Delete project and its files
#
# =============================================================================

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, Field

from taskify.api.cache import cached_json, invalidate_projects
from taskify.auth.context import Identity
from taskify.auth.middleware import require_identity
from taskify.core.models import Project
from taskify.services.projects import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_service(request: Request) -> ProjectService:
    return request.app.state.project_service


class ProjectInput(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None


@router.post("", response_model=Project, status_code=201)
async def create_project(
    data: ProjectInput,
    request: Request,
    identity: Identity = Depends(require_identity),
    projects: ProjectService = Depends(get_project_service),
):
    project = await projects.create(identity, data.title, data.description)
    await invalidate_projects(request)
    return project


@router.get("", response_model=list[Project])
async def list_projects(
    request: Request,
    identity: Identity = Depends(require_identity),
    projects: ProjectService = Depends(get_project_service),
):
    return await cached_json(request, identity, lambda: projects.list_for_owner(identity))


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    request: Request,
    identity: Identity = Depends(require_identity),
    projects: ProjectService = Depends(get_project_service),
):
    return await cached_json(request, identity, lambda: projects.get(project_id, identity))


@router.put("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    data: ProjectInput,
    request: Request,
    identity: Identity = Depends(require_identity),
    projects: ProjectService = Depends(get_project_service),
):
    project = await projects.update(project_id, identity, data.title, data.description)
    await invalidate_projects(request)
    return project


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    request: Request,
    identity: Identity = Depends(require_identity),
    projects: ProjectService = Depends(get_project_service),
):
    await projects.delete(project_id, identity)
    await invalidate_projects(request)
    return Response(status_code=204)

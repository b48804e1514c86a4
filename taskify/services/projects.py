"""
Project service - CRUD for projects, restricted to their owner.
"""

from __future__ import annotations

import logging

from taskify.auth.context import Identity
from taskify.auth.guard import authorize_project
from taskify.core.errors import NotFoundError
from taskify.core.models import Project
from taskify.storage.base import ContentStorage
from taskify.storage.repositories import FileStore, ProjectStore

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, projects: ProjectStore, files: FileStore, content: ContentStorage):
        self.projects = projects
        self.files = files
        self.content = content

    async def create(self, identity: Identity, title: str, description: str | None = None) -> Project:
        project = await self.projects.create(
            Project(title=title, description=description, owner_id=identity.id)
        )
        logger.info(f"Project {project.id} created by {identity.id}")
        return project

    async def list_for_owner(self, identity: Identity) -> list[Project]:
        return await self.projects.list_by_owner(identity.id)

    async def get(self, project_id: str, identity: Identity) -> Project:
        """
        Load a project the caller owns.

        Raises NotFoundError before AccessDeniedError, so a missing project
        is never reported as a permissions problem.
        """
        project = await self.projects.get(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return authorize_project(project, identity)

    async def update(
        self,
        project_id: str,
        identity: Identity,
        title: str,
        description: str | None = None,
    ) -> Project:
        await self.get(project_id, identity)
        project = await self.projects.update(project_id, title, description)
        if not project:
            raise NotFoundError("Project not found")
        return project

    async def delete(self, project_id: str, identity: Identity) -> None:
        await self.get(project_id, identity)
        for record in await self.files.list_by_project(project_id):
            try:
                await self.content.delete(record.public_id)
            except OSError as e:
                logger.warning(f"Failed to delete stored object {record.public_id}: {e}")
            await self.files.delete(record.id)
        await self.projects.delete(project_id)
        logger.info(f"Project {project_id} deleted by {identity.id}")

"""
Typed stores over MetadataStorage.

Services talk to these instead of raw collections. Each store maps
documents to the core models and back.
"""

from __future__ import annotations

from taskify.core.models import FileStats, Project, StoredFile, User
from taskify.core.utils import utc_now
from taskify.storage.base import Collections, MetadataStorage

# Upper bound for "all rows" queries against the document store
_ALL = 10_000


class UserStore:
    """Persists users and the single refresh token per user."""

    def __init__(self, metadata: MetadataStorage):
        self._metadata = metadata

    async def create(self, user: User) -> bool:
        """Insert a user. False if the email is already taken."""
        return await self._metadata.create(
            Collections.USERS,
            user.id,
            user.model_dump(),
            unique=["email"],
        )

    async def get_by_id(self, user_id: str) -> User | None:
        doc = await self._metadata.get(Collections.USERS, user_id)
        return User.model_validate(doc) if doc else None

    async def get_by_email(self, email: str) -> User | None:
        # Exact match: emails are case-sensitive as stored
        docs = await self._metadata.query(Collections.USERS, {"email": email}, limit=1)
        return User.model_validate(docs[0]) if docs else None

    async def set_refresh_token(self, user_id: str, token: str | None) -> bool:
        """Unconditionally overwrite the stored refresh token."""
        return await self._metadata.update(Collections.USERS, user_id, {"refresh_token": token})

    async def swap_refresh_token(self, user_id: str, expected: str, new: str) -> bool:
        """Replace the refresh token only if it still equals `expected`."""
        return await self._metadata.compare_and_set(
            Collections.USERS, user_id, "refresh_token", expected, new
        )

    async def delete(self, user_id: str) -> bool:
        return await self._metadata.delete(Collections.USERS, user_id)


class ProjectStore:
    def __init__(self, metadata: MetadataStorage):
        self._metadata = metadata

    async def create(self, project: Project) -> Project:
        await self._metadata.save(Collections.PROJECTS, project.id, project.model_dump())
        return project

    async def get(self, project_id: str) -> Project | None:
        doc = await self._metadata.get(Collections.PROJECTS, project_id)
        return Project.model_validate(doc) if doc else None

    async def list_by_owner(self, owner_id: str) -> list[Project]:
        docs = await self._metadata.query(Collections.PROJECTS, {"owner_id": owner_id}, limit=_ALL)
        projects = [Project.model_validate(doc) for doc in docs]
        return sorted(projects, key=lambda p: p.created_at)

    async def update(self, project_id: str, title: str, description: str | None) -> Project | None:
        updated = await self._metadata.update(
            Collections.PROJECTS,
            project_id,
            {"title": title, "description": description, "updated_at": utc_now()},
        )
        return await self.get(project_id) if updated else None

    async def delete(self, project_id: str) -> bool:
        return await self._metadata.delete(Collections.PROJECTS, project_id)


class FileStore:
    def __init__(self, metadata: MetadataStorage):
        self._metadata = metadata

    async def create(self, record: StoredFile) -> StoredFile:
        await self._metadata.save(Collections.FILES, record.id, record.model_dump())
        return record

    async def get(self, file_id: str) -> StoredFile | None:
        doc = await self._metadata.get(Collections.FILES, file_id)
        return StoredFile.model_validate(doc) if doc else None

    async def list_by_project(self, project_id: str) -> list[StoredFile]:
        """Files of a project, newest first."""
        docs = await self._metadata.query(Collections.FILES, {"project_id": project_id}, limit=_ALL)
        files = [StoredFile.model_validate(doc) for doc in docs]
        return sorted(files, key=lambda f: f.created_at, reverse=True)

    async def delete(self, file_id: str) -> bool:
        return await self._metadata.delete(Collections.FILES, file_id)

    async def project_stats(self, project_id: str) -> FileStats:
        return _stats(await self._metadata.query(Collections.FILES, {"project_id": project_id}, limit=_ALL))

    async def uploader_stats(self, user_id: str) -> FileStats:
        return _stats(await self._metadata.query(Collections.FILES, {"uploaded_by": user_id}, limit=_ALL))


def _stats(docs: list[dict]) -> FileStats:
    return FileStats(
        total_files=len(docs),
        total_size=sum(doc.get("size", 0) for doc in docs),
    )

"""
File service - project attachments.

Bytes go to ContentStorage, metadata to the FileStore. Every operation is
authorized through the parent project's owner.
"""

from __future__ import annotations

import logging
import re
import secrets
import string
import time
from dataclasses import dataclass
from typing import Any

from taskify.auth.context import Identity
from taskify.auth.guard import authorize_file, authorize_project
from taskify.core.errors import NotFoundError, StorageError, ValidationError
from taskify.core.models import FileStats, Project, StoredFile
from taskify.storage.base import ContentStorage
from taskify.storage.repositories import FileStore, ProjectStore

logger = logging.getLogger(__name__)


# =============================================================================
# Upload policy
# =============================================================================

IMAGE_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
})

DOCUMENT_MIME_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "text/csv",
})

ARCHIVE_MIME_TYPES = frozenset({
    "application/zip",
    "application/x-rar-compressed",
    "application/x-7z-compressed",
})

ALLOWED_MIME_TYPES = IMAGE_MIME_TYPES | DOCUMENT_MIME_TYPES | ARCHIVE_MIME_TYPES

STORAGE_FOLDER = "taskify/projects"


@dataclass
class Upload:
    """A file received from the client, fully buffered."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def get_file_extension(filename: str) -> str:
    _, dot, ext = filename.rpartition(".")
    return ext.lower() if dot else ""


def generate_file_name(original_name: str, prefix: str | None = None) -> str:
    """
    Build a unique, filesystem-safe stored name.

    Shape: [<prefix>_]<base>_<millis>_<random6>.<ext>
    """
    timestamp = int(time.time() * 1000)
    random = "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(6))
    extension = get_file_extension(original_name)
    base_name = re.sub(r"[^a-zA-Z0-9]", "_", re.sub(r"\.[^/.]+$", "", original_name))

    name = f"{base_name}_{timestamp}_{random}"
    if prefix:
        name = f"{prefix}_{name}"
    return f"{name}.{extension}" if extension else name


# =============================================================================
# Service
# =============================================================================


class FileService:
    def __init__(
        self,
        projects: ProjectStore,
        files: FileStore,
        content: ContentStorage,
        max_files: int = 5,
        max_file_size: int = 10 * 1024 * 1024,
    ):
        self.projects = projects
        self.files = files
        self.content = content
        self.max_files = max_files
        self.max_file_size = max_file_size

    async def _owned_project(self, project_id: str, identity: Identity) -> Project:
        project = await self.projects.get(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return authorize_project(project, identity)

    async def _owned_file(self, file_id: str, identity: Identity) -> StoredFile:
        record = await self.files.get(file_id)
        if not record:
            raise NotFoundError("File not found")
        project = await self.projects.get(record.project_id)
        if not project:
            raise NotFoundError("File not found")
        return authorize_file(record, project, identity)

    def validate_count(self, count: int) -> None:
        if not count:
            raise ValidationError("No files provided")
        if count > self.max_files:
            raise ValidationError(f"Too many files: at most {self.max_files} per request")

    def validate_uploads(self, uploads: list[Upload]) -> None:
        self.validate_count(len(uploads))
        for upload in uploads:
            if upload.content_type not in ALLOWED_MIME_TYPES:
                raise ValidationError(
                    f"File type {upload.content_type} is not allowed",
                    details={"file": upload.filename},
                )
            if upload.size > self.max_file_size:
                raise ValidationError(
                    f"File {upload.filename} exceeds the {self.max_file_size} byte limit",
                    details={"file": upload.filename, "limit": self.max_file_size},
                )

    async def upload(self, project_id: str, identity: Identity, uploads: list[Upload]) -> list[StoredFile]:
        """Validate, store and record a batch of files for a project."""
        await self._owned_project(project_id, identity)
        self.validate_uploads(uploads)
        return [await self._upload_one(upload, project_id, identity) for upload in uploads]

    async def _upload_one(self, upload: Upload, project_id: str, identity: Identity) -> StoredFile:
        stored_name = generate_file_name(upload.filename, prefix=project_id)
        key = f"{STORAGE_FOLDER}/{project_id}/{stored_name}"

        try:
            url = await self.content.put(key, upload.data, upload.content_type)
        except OSError as e:
            logger.error(f"Failed to upload file {upload.filename}: {e}")
            raise StorageError(f"Failed to upload file: {upload.filename}")

        record = await self.files.create(StoredFile(
            original_name=upload.filename,
            stored_name=stored_name,
            mime_type=upload.content_type,
            size=upload.size,
            url=url,
            public_id=key,
            project_id=project_id,
            uploaded_by=identity.id,
        ))
        logger.info(f"File uploaded successfully: {upload.filename} -> {key}")
        return record

    async def list_for_project(self, project_id: str, identity: Identity) -> dict[str, Any]:
        await self._owned_project(project_id, identity)
        return {
            "files": await self.files.list_by_project(project_id),
            "stats": await self.files.project_stats(project_id),
        }

    async def get(self, file_id: str, identity: Identity) -> StoredFile:
        return await self._owned_file(file_id, identity)

    async def delete(self, file_id: str, identity: Identity) -> None:
        record = await self._owned_file(file_id, identity)

        try:
            await self.content.delete(record.public_id)
        except OSError as e:
            logger.warning(f"Failed to delete stored object {record.public_id}: {e}")

        await self.files.delete(file_id)
        logger.info(f"File deleted: {file_id}")

    async def user_stats(self, identity: Identity) -> FileStats:
        return await self.files.uploader_stats(identity.id)

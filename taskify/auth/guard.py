"""
Ownership guard.

A project is accessible only to its owner. A file is accessible only to
the owner of its parent project; who uploaded it does not matter.
"""

from __future__ import annotations

from taskify.auth.context import Identity
from taskify.core.errors import AccessDeniedError
from taskify.core.models import Project, StoredFile


def ensure_owner(owner_id: str, identity: Identity) -> None:
    if owner_id != identity.id:
        raise AccessDeniedError("Access denied: You are not the owner of this project")


def authorize_project(project: Project, identity: Identity) -> Project:
    ensure_owner(project.owner_id, identity)
    return project


def authorize_file(file: StoredFile, project: Project, identity: Identity) -> StoredFile:
    if file.project_id != project.id:
        raise ValueError(f"File {file.id} does not belong to project {project.id}")
    ensure_owner(project.owner_id, identity)
    return file

"""
Domain services for projects and file attachments.
"""

from taskify.services.files import ALLOWED_MIME_TYPES, FileService, Upload, generate_file_name
from taskify.services.projects import ProjectService

__all__ = [
    "ALLOWED_MIME_TYPES",
    "FileService",
    "ProjectService",
    "Upload",
    "generate_file_name",
]

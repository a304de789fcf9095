"""
multimime

Lets one file extension accept several MIME types on top of an upload
allow-list that only holds one MIME type per extension.
"""

from multimime.exceptions import MultiMimeException, SniffingError
from multimime.models.upload import (
    ExtensionMimeSet,
    FileTypeInfo,
    ReconciliationResult,
    UploadProbe,
)
from multimime.plugin import MultiMimeUploads, create_default_uploads, multi_mime_uploads
from multimime.projector import project
from multimime.reconciler import reconcile
from multimime.registry import MimeRegistry, normalize_mime_set

__all__ = [
    "ExtensionMimeSet",
    "FileTypeInfo",
    "MimeRegistry",
    "MultiMimeException",
    "MultiMimeUploads",
    "ReconciliationResult",
    "SniffingError",
    "UploadProbe",
    "create_default_uploads",
    "multi_mime_uploads",
    "normalize_mime_set",
    "project",
    "reconcile",
]

"""
Host-side collaborators: the default single-MIME allow-list, the
filename -> extension lookup over it, and content sniffing.

Allow-list keys are extension alternations such as ``"jpg|jpeg|jpe"``;
each key maps to exactly one MIME type.
"""

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from multimime.exceptions import SniffingError
from multimime.models.upload import FileTypeInfo

logger = logging.getLogger(__name__)

# Default upload allow-list, one MIME type per extension alternation
DEFAULT_UPLOAD_MIMES: Dict[str, str] = {
    # Images
    "jpg|jpeg|jpe": "image/jpeg",
    "gif": "image/gif",
    "png": "image/png",
    "bmp": "image/bmp",
    "tiff|tif": "image/tiff",
    "webp": "image/webp",
    "ico": "image/x-icon",
    "heic": "image/heic",
    # Audio / video
    "mp3|m4a|m4b": "audio/mpeg",
    "wav": "audio/wav",
    "ogg|oga": "audio/ogg",
    "flac": "audio/flac",
    "mp4|m4v": "video/mp4",
    "mov|qt": "video/quicktime",
    "webm": "video/webm",
    "avi": "video/avi",
    # Text
    "txt|asc|c|cc|h|srt": "text/plain",
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
    "vtt": "text/vtt",
    "rtf": "application/rtf",
    # Documents
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xla|xls|xlt|xlw": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pot|pps|ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "odt": "application/vnd.oasis.opendocument.text",
    "ods": "application/vnd.oasis.opendocument.spreadsheet",
    "odp": "application/vnd.oasis.opendocument.presentation",
    # Archives
    "zip": "application/zip",
    "gz|gzip": "application/x-gzip",
    "tar": "application/x-tar",
    "7z": "application/x-7z-compressed",
    "rar": "application/rar",
}


def check_filetype(filename: str, mimes: Optional[Mapping[str, str]] = None) -> FileTypeInfo:
    """
    Resolve a filename to an extension and its default MIME type.

    The filename's suffix is matched case-insensitively against every
    alternative of every allow-list key; the first key that matches wins.

    Args:
        filename: File name (only the trailing extension matters)
        mimes: Allow-list to match against; defaults to DEFAULT_UPLOAD_MIMES

    Returns:
        FileTypeInfo with ``ext`` and ``type`` set, or both None

    Examples:
        >>> check_filetype("Photo.JPG")
        FileTypeInfo(ext='jpg', type='image/jpeg')
        >>> check_filetype("notes.unknown")
        FileTypeInfo(ext=None, type=None)
    """
    if mimes is None:
        mimes = DEFAULT_UPLOAD_MIMES

    name = (filename or "").lower()
    for pattern, mime in mimes.items():
        for alternative in str(pattern).lower().split("|"):
            alternative = alternative.strip().lstrip(".")
            if alternative and name.endswith("." + alternative):
                return FileTypeInfo(ext=alternative, type=mime)

    return FileTypeInfo()


def content_sniffing_available() -> bool:
    """Return True when python-magic and its libmagic backend can be loaded."""
    try:
        import magic  # noqa: F401
    except ImportError:
        return False
    return True


def sniff_mime_type(path: Union[str, Path]) -> str:
    """
    Determine a file's MIME type from its content.

    The whole file is handed to libmagic; container formats such as OOXML
    are only recognized from entries past the file head.

    Args:
        path: File to inspect

    Returns:
        MIME type reported by libmagic

    Raises:
        SniffingError: If libmagic is unavailable, the file cannot be read,
            or libmagic fails on the content
    """
    if not content_sniffing_available():
        raise SniffingError("Content sniffing requires libmagic, which is not available")

    import magic

    path = Path(path)
    if not path.is_file():
        raise SniffingError(f"Cannot read {path}: not a regular file")

    try:
        mime_type = magic.from_file(str(path), mime=True)
    except OSError as e:
        raise SniffingError(f"Cannot read {path}: {e}") from e
    except magic.MagicException as e:
        raise SniffingError(f"libmagic failed on {path}: {e}") from e

    logger.debug("Sniffed content type", extra={"path": str(path), "sniffed_type": mime_type})
    return mime_type

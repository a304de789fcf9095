"""
Upload validation wiring.

``MultiMimeUploads`` connects the registry, the projector and the
reconciler at the two points of a host's upload flow:

- ``upload_mimes`` builds the single-MIME allow-list the host checks first.
- ``check_filetype_and_ext`` is the second-chance check run after the host
  has failed to match a file's extension and sniffed type.

``validate`` runs the whole flow for a file on disk.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from multimime.core.logging import upload_filename_context
from multimime.exceptions import SniffingError
from multimime.host import (
    DEFAULT_UPLOAD_MIMES,
    check_filetype,
    content_sniffing_available,
    sniff_mime_type,
)
from multimime.models.upload import FileTypeInfo, ReconciliationResult, UploadProbe
from multimime.projector import project
from multimime.reconciler import reconcile
from multimime.registry import MimeRegistry, settings_mime_filter

logger = logging.getLogger(__name__)


class MultiMimeUploads:
    """Multiple MIME types per extension on top of a single-MIME allow-list."""

    def __init__(
        self,
        registry: Optional[MimeRegistry] = None,
        base_table: Optional[Mapping[str, str]] = None,
    ):
        self.registry = registry if registry is not None else MimeRegistry()
        self.base_table: Dict[str, str] = dict(
            base_table if base_table is not None else DEFAULT_UPLOAD_MIMES
        )

    def upload_mimes(self, mimes: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Return the allow-list with each registered extension set to its primary type.

        Args:
            mimes: Table to extend; defaults to this instance's base table
        """
        additional = self.registry.get_additional_mimes(None)
        return project(self.base_table if mimes is None else mimes, additional)

    def _resolve_extension(self, filename: str) -> FileTypeInfo:
        return check_filetype(filename, self.upload_mimes())

    def check_filetype_and_ext(
        self,
        filetype_and_ext: ReconciliationResult,
        filename: str,
        real_mime: Optional[str],
        allowed_mimes: Optional[Mapping[str, str]] = None,
        actor: Any = None,
        can_sniff: Optional[bool] = None,
    ) -> ReconciliationResult:
        """
        Second-chance check of a file against every registered MIME type.

        Args:
            filetype_and_ext: The host's result so far
            filename: Client-supplied file name
            real_mime: Sniffed MIME type, or None if sniffing was not done
            allowed_mimes: Explicit allow-list the caller validated against
            actor: Identity passed to registry callbacks
            can_sniff: Override for the content sniffing capability probe

        Returns:
            The reconciled result on a match, otherwise ``filetype_and_ext``
        """
        if can_sniff is None:
            can_sniff = content_sniffing_available()

        probe = UploadProbe(
            filename=filename,
            extension_hint=filetype_and_ext.extension,
            default_type=filetype_and_ext.mime_type,
            sniffed_type=real_mime or "",
            already_resolved=bool(filetype_and_ext.mime_type),
        )
        result = reconcile(
            probe,
            self.registry.get_additional_mimes(actor),
            can_sniff,
            allowed_mimes=allowed_mimes,
            resolver=self._resolve_extension,
        )
        return result if result.matched else filetype_and_ext

    def validate(
        self,
        path: Union[str, Path],
        filename: str,
        allowed_mimes: Optional[Mapping[str, str]] = None,
        actor: Any = None,
    ) -> ReconciliationResult:
        """
        Validate an uploaded file's extension and content type.

        The filename is first matched against the allow-list (the caller's
        explicit one, or the projected default) and the match is kept only
        if the sniffed type agrees with it. Files that fail that check get
        a second chance against the full registry.

        Args:
            path: Location of the uploaded content
            filename: Client-supplied file name
            allowed_mimes: Explicit allow-list; disables the second chance
            actor: Identity passed to registry callbacks

        Returns:
            Accepted extension and MIME type, or an empty result on rejection
        """
        token = upload_filename_context.set(filename)
        try:
            table = dict(allowed_mimes) if allowed_mimes else self.upload_mimes()
            info = check_filetype(filename, table)

            can_sniff = content_sniffing_available()
            real_mime: Optional[str] = None
            if can_sniff:
                try:
                    real_mime = sniff_mime_type(path)
                except SniffingError as e:
                    logger.warning(f"Content sniffing failed, using filename only: {e}")
                    can_sniff = False

            ext, mime = info.ext, info.type
            if real_mime is not None and mime and real_mime != mime:
                logger.debug(
                    "Sniffed type does not match allow-list type",
                    extra={"extension": ext, "expected_type": mime, "sniffed_type": real_mime},
                )
                ext = mime = None

            current = ReconciliationResult(extension=ext, mime_type=mime)
            return self.check_filetype_and_ext(
                current,
                filename,
                real_mime,
                allowed_mimes=allowed_mimes,
                actor=actor,
                can_sniff=can_sniff,
            )
        finally:
            upload_filename_context.reset(token)


def create_default_uploads() -> MultiMimeUploads:
    """Create an instance fed by the ADDITIONAL_MIMES setting."""
    registry = MimeRegistry()
    registry.add_filter(settings_mime_filter)
    return MultiMimeUploads(registry=registry)


# Singleton instance
multi_mime_uploads = create_default_uploads()

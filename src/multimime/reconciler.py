"""
Second-chance acceptance for non-primary MIME types.

The host's allow-list only knows the primary MIME type of each extension.
When content sniffing reports one of the extension's other registered
types, the host rejects the file. ``reconcile`` re-checks such uploads
against the full MIME list of the extension and, on a match, accepts the
sniffed type under the resolved extension.

The reconciler only widens acceptance. It stays out of the way when an
earlier stage already decided, when content sniffing is unavailable, or
when the caller supplied its own allow-list.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Union

from multimime.models.upload import FileTypeInfo, ReconciliationResult, UploadProbe
from multimime.registry import lookup_mimes, normalize_extension, normalize_mime_set

logger = logging.getLogger(__name__)

ExtensionResolver = Callable[[str], Union[FileTypeInfo, Mapping[str, Any]]]


def _resolved_ext(info: Any) -> Optional[str]:
    """Read the extension from a FileTypeInfo or an ``{"extension": ...}`` mapping."""
    if info is None:
        return None
    if isinstance(info, Mapping):
        return info.get("ext") or info.get("extension")
    return getattr(info, "ext", None)


def _resolve_extension(probe: UploadProbe, resolver: Optional[ExtensionResolver]) -> Optional[str]:
    """Resolve the probe's extension via the host lookup, or its hint."""
    if resolver is None:
        return normalize_extension(probe.extension_hint) if probe.extension_hint else None

    try:
        ext = _resolved_ext(resolver(probe.filename))
        return normalize_extension(ext) if ext else None
    except Exception as e:
        logger.warning(
            f"Extension lookup failed: {e}",
            extra={"upload_filename": probe.filename},
            exc_info=True,
        )
        return None


def reconcile(
    probe: UploadProbe,
    registry: Optional[Mapping[str, Any]],
    can_sniff: bool,
    allowed_mimes: Optional[Mapping[str, str]] = None,
    resolver: Optional[ExtensionResolver] = None,
) -> ReconciliationResult:
    """
    Decide whether an upload is acceptable under a non-primary MIME type.

    Args:
        probe: The upload attempt
        registry: Extension -> one or many MIME types
        can_sniff: Whether content sniffing is available in this runtime
        allowed_mimes: Explicit allow-list supplied by the caller, if any
        resolver: Host single-MIME lookup returning a FileTypeInfo or an
            ``{"extension": ..., "default_type": ...}`` mapping;
            when omitted, ``probe.extension_hint`` is used

    Returns:
        Matched result carrying the sniffed type, or an empty result.
        Never raises.

    Examples:
        >>> probe = UploadProbe(filename="plan.dwg", extension_hint="dwg", sniffed_type="image/vnd.dwg")
        >>> reconcile(probe, {"dwg": ["application/acad", "image/vnd.dwg"]}, can_sniff=True).mime_type
        'image/vnd.dwg'
    """
    if probe.already_resolved:
        return ReconciliationResult.empty()

    # Filename-only matching is not trusted, so without sniffing we pass through
    if not can_sniff:
        logger.debug(
            "Content sniffing unavailable, skipping reconciliation",
            extra={"upload_filename": probe.filename},
        )
        return ReconciliationResult.empty()

    if allowed_mimes:
        return ReconciliationResult.empty()

    extension = _resolve_extension(probe, resolver)
    if not extension:
        return ReconciliationResult.empty()

    mimes = lookup_mimes(normalize_mime_set(registry), extension)
    if not mimes:
        return ReconciliationResult.empty()

    if probe.sniffed_type not in mimes:
        logger.debug(
            "Sniffed type not registered for extension",
            extra={
                "upload_filename": probe.filename,
                "extension": extension,
                "sniffed_type": probe.sniffed_type,
            },
        )
        return ReconciliationResult.empty()

    logger.info(
        "Accepted upload under additional MIME type",
        extra={
            "upload_filename": probe.filename,
            "extension": extension,
            "mime_type": probe.sniffed_type,
        },
    )
    return ReconciliationResult(
        extension=extension,
        mime_type=probe.sniffed_type,
        filename_correction_needed=False,
    )

"""
Extension -> MIME set registry.

Integrators register filter callbacks that contribute extension to MIME
type mappings. Each value may be a single MIME string or a sequence of
them; the first entry is the primary type. The chain is evaluated fresh on
every call so a callback may return different mappings per context (for
example per acting user).
"""

import itertools
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from multimime.models.upload import ExtensionMimeSet

logger = logging.getLogger(__name__)

OneOrMany = Union[str, Iterable[str]]
MimeFilter = Callable[[Dict[str, OneOrMany], Any], Mapping[str, OneOrMany]]

DEFAULT_PRIORITY = 10


def normalize_extension(ext: Any) -> str:
    """
    Lowercase an extension key and drop whitespace and a leading dot.

    Each alternative of a ``"jpg | .JPEG"`` style key is cleaned on its own
    and empty alternatives are dropped, giving ``"jpg|jpeg"``.
    """
    parts = (part.strip().lstrip(".").strip().lower() for part in str(ext).split("|"))
    return "|".join(part for part in parts if part)


def normalize_mimes(value: Any) -> List[str]:
    """
    Normalize a singleton-or-sequence MIME value to a list of strings.

    Duplicates are dropped, keeping the first occurrence so the primary
    type never changes.

    Examples:
        >>> normalize_mimes("application/json")
        ['application/json']
        >>> normalize_mimes(["application/acad", "image/vnd.dwg", "application/acad"])
        ['application/acad', 'image/vnd.dwg']
    """
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        items = [value]
    elif isinstance(value, Iterable):
        items = list(value)
    else:
        items = [value]

    mimes: List[str] = []
    for item in items:
        if item is None:
            continue
        mime = item.decode("utf-8", errors="replace") if isinstance(item, bytes) else str(item)
        mime = mime.strip()
        if mime and mime not in mimes:
            mimes.append(mime)
    return mimes


def normalize_mime_set(raw: Optional[Mapping[Any, Any]]) -> ExtensionMimeSet:
    """
    Normalize integrator-supplied mappings into an ExtensionMimeSet.

    Malformed entries are coerced, never rejected: blank keys and ``None``
    values are dropped, everything else goes through ``str()``.

    Args:
        raw: Mapping of extension to one or many MIME types

    Returns:
        New dict of normalized extension to MIME list
    """
    if not raw:
        return {}
    if not isinstance(raw, Mapping):
        logger.warning(
            "Ignoring MIME registry that is not a mapping",
            extra={"registry_type": type(raw).__name__},
        )
        return {}

    mime_set: ExtensionMimeSet = {}
    for ext, value in raw.items():
        key = normalize_extension(ext)
        if not key or value is None:
            continue
        mimes = normalize_mimes(value)
        if key in mime_set:
            mimes = mime_set[key] + [m for m in mimes if m not in mime_set[key]]
        mime_set[key] = mimes
    return mime_set


def lookup_mimes(registry: Mapping[str, List[str]], extension: Optional[str]) -> List[str]:
    """
    Return the full MIME list registered for an extension.

    Keys may be alternations like ``"jpg|jpeg"``; every alternative matches.
    Returns an empty list when the extension is not registered.
    """
    if not extension:
        return []
    ext = normalize_extension(extension)
    if ext in registry:
        return list(registry[ext])
    for key, mimes in registry.items():
        if "|" in str(key) and ext in normalize_extension(key).split("|"):
            return list(mimes)
    return []


class MimeRegistry:
    """Filter chain producing the additional extension -> MIME set mappings."""

    def __init__(self):
        self._filters: List[Tuple[int, int, MimeFilter]] = []
        self._sequence = itertools.count()

    def add_filter(self, callback: MimeFilter, priority: int = DEFAULT_PRIORITY) -> None:
        """Register a callback ``callback(mimes, context) -> mapping``.

        Lower priorities run first; equal priorities run in registration order.
        """
        self._filters.append((priority, next(self._sequence), callback))
        self._filters.sort(key=lambda entry: (entry[0], entry[1]))

    def remove_filter(self, callback: MimeFilter) -> bool:
        """Unregister every registration of ``callback``. Returns True if any was removed."""
        before = len(self._filters)
        self._filters = [entry for entry in self._filters if entry[2] is not callback]
        return len(self._filters) != before

    def has_filters(self) -> bool:
        """Return True when at least one callback is registered."""
        return bool(self._filters)

    def get_additional_mimes(self, context: Any = None) -> ExtensionMimeSet:
        """
        Run the filter chain and return the normalized ExtensionMimeSet.

        The chain starts from an empty mapping and each callback receives a
        copy of the previous callback's output. Nothing is cached between
        calls.

        Args:
            context: Opaque identity token passed through to callbacks

        Returns:
            Normalized extension -> MIME list mapping (possibly empty)
        """
        mimes: Dict[str, OneOrMany] = {}
        for _priority, _seq, callback in self._filters:
            result = callback(dict(mimes), context)
            if not isinstance(result, Mapping):
                logger.warning(
                    "MIME filter returned a non-mapping value; keeping previous mappings",
                    extra={"callback": getattr(callback, "__qualname__", repr(callback))},
                )
                continue
            mimes = dict(result)

        mime_set = normalize_mime_set(mimes)
        logger.debug(
            "Resolved additional MIME types",
            extra={"extension_count": len(mime_set), "filter_count": len(self._filters)},
        )
        return mime_set


def settings_mime_filter(mimes: Dict[str, OneOrMany], context: Any = None) -> Dict[str, OneOrMany]:
    """Filter callback merging the ADDITIONAL_MIMES setting into the chain."""
    from multimime.core.config import settings

    merged = dict(mimes)
    merged.update(settings.ADDITIONAL_MIMES)
    return merged

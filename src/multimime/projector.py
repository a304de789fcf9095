"""Projection of multi-MIME registries onto a single-MIME allow-list."""

import logging
from typing import Any, Dict, Mapping, Optional

from multimime.registry import normalize_mime_set

logger = logging.getLogger(__name__)


def project(
    base_table: Optional[Mapping[str, str]], registry: Optional[Mapping[str, Any]]
) -> Dict[str, str]:
    """
    Reduce a multi-MIME registry to the host's one-MIME-per-extension table.

    Every extension in the registry is set (or overwritten) to its primary
    MIME type, the first of its list. Extensions absent from the registry
    keep their base value. Non-primary types are left to the reconciler.

    Args:
        base_table: Host allow-list of extension -> MIME type
        registry: Extension -> one or many MIME types (normalized here)

    Returns:
        New merged table; ``base_table`` is not modified

    Examples:
        >>> project({"pdf": "application/pdf"}, {"dwg": ["application/acad", "image/vnd.dwg"]})
        {'pdf': 'application/pdf', 'dwg': 'application/acad'}
    """
    table: Dict[str, str] = dict(base_table or {})

    for ext, mimes in normalize_mime_set(registry).items():
        if not mimes:
            continue
        table[ext] = mimes[0]

    logger.debug("Projected primary MIME types", extra={"table_size": len(table)})
    return table

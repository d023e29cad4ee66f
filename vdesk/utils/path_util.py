from __future__ import annotations

import re
from typing import Optional

from vdesk.core.exceptions import ValidationError
from vdesk.utils.logging import get_logger

logger = get_logger(__name__)

PATH_SEPARATOR = "/"

# Characters that cannot appear in a single path segment
_INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*]')


def join_path(parent_path: Optional[str], name: str) -> str:
    """Materialized path of ``name`` under ``parent_path`` ('' or None at root)."""
    return f"{parent_path or ''}{PATH_SEPARATOR}{name}"


def sanitize_name(name: Optional[str], field: str = "name") -> str:
    """Trim a display name and replace characters illegal in a path segment.

    Raises ValidationError when nothing is left.
    """
    if name is None or not isinstance(name, str) or not name.strip():
        raise ValidationError("Name is required", field=field)

    stripped = name.strip()
    sanitized = _INVALID_NAME_CHARS.sub("_", stripped)
    if sanitized != stripped:
        logger.warning(f"Item name sanitized: {stripped} -> {sanitized}")
    return sanitized

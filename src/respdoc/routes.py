"""File-based route resolution: handler modules and URL paths from a ``routes`` directory."""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

HANDLER_VERBS = ("get", "post", "delete", "put")
MODULE_FILE = "mod.rs"
DEFAULT_SOURCE_ROOT = "src/routes"

_PARAM_SEGMENT = re.compile(r"_(.*?)(/|\.rs)")


def handler_verbs(text: str) -> list[str]:
    """Return the verbs whose ``async fn <verb>`` marker appears in ``text``, in fixed order."""
    return [verb for verb in HANDLER_VERBS if f"async fn {verb}" in text]


def list_handler_modules(routes_dir: str | Path) -> list[str]:
    """List ``routes::<module>::<verb>`` for every handler found under ``routes_dir``."""
    root = Path(routes_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Directory not found: {routes_dir}")

    handlers: list[str] = []
    for path in sorted(p for p in root.rglob("*") if p.is_file()):
        if path.name.endswith(MODULE_FILE):
            continue
        verbs = handler_verbs(path.read_text(encoding="utf-8", errors="replace"))
        module = "::".join(path.relative_to(root).with_suffix("").parts)
        handlers.extend(f"routes::{module}::{verb}" for verb in verbs)
    logger.debug("Found %d handler(s) under %s", len(handlers), root)
    return handlers


def derive_path(file_path: str | Path, source_root: str = DEFAULT_SOURCE_ROOT) -> str:
    """Derive the URL path served by a handler file.

    >>> derive_path("src/routes/users/_id.rs")
    '/users/{id}'
    """
    relative = Path(file_path).as_posix().replace(source_root, "")
    path = _PARAM_SEGMENT.sub(r"{\1}/", relative)
    return path.replace(".rs", "").rstrip("/")

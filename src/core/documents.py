"""Filesystem Document Store for per-category reference material.

Layout::

    <root>/<category_slug>/knowledge_base.txt
    <root>/<category_slug>/pricing_reference.txt
    <root>/<category_slug>/pricing_analysis_guide.txt
"""

import logging
import re
from pathlib import Path

from src.core.errors import InputError

logger = logging.getLogger(__name__)

DOCUMENT_KINDS = ("knowledge_base", "pricing_reference", "pricing_analysis_guide")

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def category_slug(name: str) -> str:
    """Turn a display category name into its directory slug.

    >>> category_slug("Painting & Decorating")
    'painting_and_decorating'
    """
    slug = name.lower().replace("&", "and")
    return _SLUG_RE.sub("_", slug).strip("_")


class DocumentStore:
    """Read-only access to the reference document tree."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def list_categories(self) -> list[str]:
        """Return sorted category slugs that have at least one document."""
        if not self._root.is_dir():
            return []
        return sorted(
            p.name
            for p in self._root.iterdir()
            if p.is_dir() and any((p / f"{k}.txt").exists() for k in DOCUMENT_KINDS)
        )

    def read_document(self, category: str, kind: str) -> str:
        """Return the text of one reference document.

        Raises:
            InputError: If kind is unknown or category is empty.
            FileNotFoundError: If the document does not exist.
        """
        if kind not in DOCUMENT_KINDS:
            msg = f"Unknown document kind '{kind}'. Expected one of {list(DOCUMENT_KINDS)}"
            raise InputError(msg)
        slug = category_slug(category)
        if not slug:
            msg = "category must not be empty"
            raise InputError(msg)

        path = self._root / slug / f"{kind}.txt"
        if not path.exists():
            msg = f"Document not found: {slug}/{kind}"
            raise FileNotFoundError(msg)
        logger.debug("Reading document %s", path)
        return path.read_text(encoding="utf-8")

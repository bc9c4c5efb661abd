"""Slug generation shared by the post loader, page metadata and the OG generator."""

import re
import unicodedata
from pathlib import PurePath
from typing import Mapping, Optional

from folio.errors import PostParseError

# Slugs name output files and URL path segments
_UNSAFE_SLUG_RE = re.compile(r"[\\/\x00]")


def slugify(text: str) -> str:
    """Turn arbitrary text into a URL slug.

    The slug is lowercased, ASCII-only, and uses hyphens as separators.
    """
    # Normalise unicode, keep only ASCII
    slug = unicodedata.normalize("NFKD", text)
    slug = slug.encode("ascii", "ignore").decode("ascii")

    # Lowercase and replace runs of non-alphanumeric chars with a single hyphen
    slug = re.sub(r"[^a-z0-9]+", "-", slug.lower())
    slug = slug.strip("-")

    return slug or "post"


def resolve_slug(
    metadata: Mapping, filename: Optional[str] = None, title: str = ""
) -> str:
    """Return the slug a post is published under.

    An explicit ``slug`` front-matter value wins and is used verbatim (only
    surrounding whitespace is removed). Otherwise the filename without its
    extension is used, and only when there is no filename either is the
    title slugified.

    Raises:
        PostParseError: if the explicit slug contains a path separator or is
            a relative path component (``.`` or ``..``).
    """
    explicit = metadata.get("slug")
    if explicit is not None and str(explicit).strip():
        slug = str(explicit).strip()
        if _UNSAFE_SLUG_RE.search(slug) or slug in (".", ".."):
            raise PostParseError(f"slug {slug!r} is not a safe file name", filename)
        return slug
    if filename:
        return PurePath(filename).stem
    return slugify(title)

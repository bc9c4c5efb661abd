"""Loading blog posts from markdown files with a YAML front-matter header."""

import datetime
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional

import frontmatter
import yaml

from folio.errors import PostParseError, PostsDirectoryNotFound
from folio.models.post import Post
from folio.services.normalizer import resolve_slug

logger = logging.getLogger(__name__)

POST_SUFFIX = ".md"
# Files whose name contains this marker are never published
DRAFT_MARKER = "draft"
WORDS_PER_MINUTE = 200


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def _as_tags(value) -> List[str]:
    """Accept a YAML list or a comma-separated string; drop blanks and repeats."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    tags: List[str] = []
    for tag in value:
        tag = str(tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def is_draft(filename: str) -> bool:
    return DRAFT_MARKER in filename


def parse_post(raw: str, filename: Optional[str] = None) -> Post:
    """Parse a post from its raw file contents.

    Raises:
        PostParseError: if the front-matter block is not valid YAML mapping data.
    """
    try:
        parsed = frontmatter.loads(raw)
    except yaml.YAMLError as exc:
        raise PostParseError(f"malformed front-matter ({exc.__class__.__name__})", filename) from exc

    metadata = parsed.metadata
    if not isinstance(metadata, dict):
        raise PostParseError("front-matter must be a mapping", filename)

    title = _as_text(metadata.get("title")) or ""
    slug = resolve_slug(metadata, filename, title)
    return Post(
        slug=slug,
        title=title or slug,
        excerpt=_as_text(metadata.get("excerpt")) or _as_text(metadata.get("description")),
        date=_as_text(metadata.get("date")),
        tags=_as_tags(metadata.get("tags")),
        image=_as_text(metadata.get("image")),
        body=parsed.content,
        source=filename,
    )


def load_post(path: Path) -> Post:
    return parse_post(path.read_text(encoding="utf-8"), path.name)


def list_post_files(posts_dir: Path) -> List[Path]:
    """Return the publishable markdown files in *posts_dir*, sorted by name.

    Raises:
        PostsDirectoryNotFound: if *posts_dir* does not exist.
    """
    if not posts_dir.is_dir():
        raise PostsDirectoryNotFound(posts_dir)
    return sorted(
        path
        for path in posts_dir.iterdir()
        if path.is_file() and path.suffix == POST_SUFFIX and not is_draft(path.name)
    )


def load_posts(posts_dir: Path) -> List[Post]:
    """Load every publishable post in *posts_dir*, newest first.

    Posts that fail to parse or cannot be read are logged and left out.
    Undated posts sort after dated ones. When two files resolve to the same
    slug the later one in filename order wins, as it does for OG cards.

    Raises:
        PostsDirectoryNotFound: if *posts_dir* does not exist.
    """
    by_slug: Dict[str, Post] = {}
    for path in list_post_files(posts_dir):
        try:
            post = load_post(path)
        except (PostParseError, UnicodeDecodeError, OSError) as exc:
            logger.error("Skipping unparsable post %s: %s", path.name, exc)
            continue
        if post.slug in by_slug:
            logger.error(
                "Duplicate slug %r: %s replaces %s", post.slug, path.name, by_slug[post.slug].source
            )
        by_slug[post.slug] = post

    posts = list(by_slug.values())
    dated = sorted((p for p in posts if p.date), key=lambda p: p.date, reverse=True)
    undated = [p for p in posts if not p.date]
    return dated + undated


def get_post(posts_dir: Path, slug: str) -> Optional[Post]:
    """Return the post published under *slug*, or *None* if there is none."""
    for post in load_posts(posts_dir):
        if post.slug == slug:
            return post
    return None


def reading_time(body: str) -> str:
    minutes = max(1, math.ceil(len(body.split()) / WORDS_PER_MINUTE))
    return f"{minutes} min read"

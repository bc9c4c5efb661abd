"""Batch generation of Open Graph preview cards for blog posts.

For every publishable post file the generator reads the front-matter, lays
out the card, renders it to PNG and writes ``<out_dir>/<slug>.png``.
A failing post never stops the batch: the run is a
fold over the files that collects a :class:`GeneratedImage` or a
:class:`GenerationFailure` for each one.
"""

import logging
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence

from folio.models.font import FontAsset
from folio.services.layout import CARD_HEIGHT, CARD_WIDTH, build_card_layout
from folio.services.posts import list_post_files, load_post
from folio.services.rasterizer import render_card_png

logger = logging.getLogger(__name__)

DEFAULT_SITE_NAME = "ebadf.me"


class GeneratedImage(NamedTuple):
    filename: str
    slug: str
    path: Path


class GenerationFailure(NamedTuple):
    filename: str
    error_kind: str
    message: str


class BatchResult(NamedTuple):
    successes: List[GeneratedImage]
    failures: List[GenerationFailure]

    @property
    def attempted(self) -> int:
        return len(self.successes) + len(self.failures)


def ensure_output_dir(out_dir: Path) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir


def render_card(
    title: str, excerpt: str, fonts: Sequence[FontAsset] = (), site_name: str = DEFAULT_SITE_NAME
) -> bytes:
    """Return the PNG bytes of one card."""
    return render_card_png(build_card_layout(title, excerpt, site_name), CARD_WIDTH, CARD_HEIGHT, fonts)


def generate_for_post(
    path: Path,
    out_dir: Path,
    fonts: Sequence[FontAsset] = (),
    site_name: str = DEFAULT_SITE_NAME,
) -> GeneratedImage:
    """Render the card for the post at *path*, overwriting any previous output."""
    post = load_post(path)
    png = render_card(post.title, post.excerpt or "", fonts, site_name)

    out_path = out_dir / f"{post.slug}.png"
    out_path.write_bytes(png)
    logger.info("Generated OG image %s", out_path)
    return GeneratedImage(filename=path.name, slug=post.slug, path=out_path)


def _step(
    result: BatchResult,
    path: Path,
    out_dir: Path,
    fonts: Sequence[FontAsset],
    site_name: str,
) -> BatchResult:
    try:
        image = generate_for_post(path, out_dir, fonts, site_name)
    except Exception as exc:
        failure = GenerationFailure(path.name, exc.__class__.__name__, str(exc))
        logger.error("Failed to generate OG image for %s: %s: %s", failure.filename, failure.error_kind, failure.message)
        return BatchResult(result.successes, [*result.failures, failure])
    return BatchResult([*result.successes, image], result.failures)


def generate_all(
    posts_dir: Path,
    out_dir: Path,
    fonts: Optional[Sequence[FontAsset]] = None,
    site_name: str = DEFAULT_SITE_NAME,
) -> BatchResult:
    """Generate cards for every publishable post in *posts_dir*.

    Raises:
        PostsDirectoryNotFound: if *posts_dir* does not exist.
    """
    files = list_post_files(posts_dir)
    ensure_output_dir(out_dir)
    fonts = list(fonts or [])

    result = BatchResult([], [])
    for path in files:
        result = _step(result, path, out_dir, fonts, site_name)

    logger.info(
        "OG generation finished: %d generated, %d failed",
        len(result.successes),
        len(result.failures),
    )
    return result

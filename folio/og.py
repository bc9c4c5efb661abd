"""Command-line entry point: ``folio-og`` / ``python -m folio.og``.

Renders an OG card for every published post. Exits 0 when the batch ran,
even if individual posts failed, and 1 when the posts directory is missing
or holds no publishable posts.
"""

import asyncio
import logging
import sys

from folio.config import get_settings
from folio.errors import PostsDirectoryNotFound
from folio.logging_config import configure_logging
from folio.services.fonts import load_fonts
from folio.services.og_generator import generate_all
from folio.services.posts import list_post_files

logger = logging.getLogger(__name__)


def main() -> int:
    configure_logging()
    settings = get_settings()

    try:
        files = list_post_files(settings.posts_dir)
    except PostsDirectoryNotFound as exc:
        logger.error("%s", exc)
        return 1
    if not files:
        logger.error("No posts found to generate OG images for in %s", settings.posts_dir)
        return 1

    fonts = asyncio.run(load_fonts(settings.font_sources, settings.font_stylesheet))
    generate_all(settings.posts_dir, settings.og_dir, fonts, settings.site_name)
    return 0


if __name__ == "__main__":
    sys.exit(main())

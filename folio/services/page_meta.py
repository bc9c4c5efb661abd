"""Document-head metadata (title, description, Open Graph, Twitter card) for posts."""

from typing import List, Optional
from urllib.parse import urljoin, urlparse

from folio.models.page_meta import MetaTag, PageMeta
from folio.models.post import Post


def og_image_url(site_url: str, slug: str, og_path: str = "/og") -> str:
    """Return the public URL of the generated card for *slug*."""
    return f"{site_url.rstrip('/')}/{og_path.strip('/')}/{slug}.png"


def _absolute(site_url: str, image: str) -> str:
    if urlparse(image).scheme in ("http", "https"):
        return image
    return urljoin(site_url.rstrip("/") + "/", image.lstrip("/"))


def build_page_meta(post: Post, site_url: str, og_path: Optional[str] = "/og") -> PageMeta:
    """Collect the head tags for a post page.

    The card image is keyed by ``post.slug``, the same slug the OG generator
    names its output after; a front-matter ``image`` takes precedence. Pass
    ``og_path=None`` for a site that publishes no generated cards.
    """
    description = post.excerpt or ""
    canonical = f"{site_url.rstrip('/')}/blog/{post.slug}"
    image: Optional[str] = None
    if post.image:
        image = _absolute(site_url, post.image)
    elif og_path is not None:
        image = og_image_url(site_url, post.slug, og_path)

    tags: List[MetaTag] = [
        MetaTag(attr="name", key="description", content=description),
        MetaTag(attr="property", key="og:title", content=post.title),
        MetaTag(attr="property", key="og:description", content=description),
        MetaTag(attr="property", key="og:type", content="article"),
        MetaTag(attr="property", key="og:url", content=canonical),
    ]
    if image:
        tags.append(MetaTag(attr="property", key="og:image", content=image))
    tags += [
        MetaTag(attr="name", key="twitter:card", content="summary_large_image" if image else "summary"),
        MetaTag(attr="name", key="twitter:title", content=post.title),
        MetaTag(attr="name", key="twitter:description", content=description),
    ]
    if image:
        tags.append(MetaTag(attr="name", key="twitter:image", content=image))

    return PageMeta(
        title=post.title,
        description=description,
        canonical_url=canonical,
        image=image,
        tags=tags,
    )

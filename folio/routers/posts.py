import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from folio.config import Settings, get_settings
from folio.errors import PostsDirectoryNotFound
from folio.models.post import Post, PostResponse, PostSummary
from folio.services.markdown_renderer import render_markdown
from folio.services.page import render_post_page
from folio.services.page_meta import build_page_meta, og_image_url
from folio.services.posts import get_post, load_posts, reading_time

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


@router.get("/blogs", response_model=List[PostSummary], summary="List published posts")
@limiter.limit("60/minute")
async def list_posts(request: Request, settings: Settings = Depends(get_settings)) -> List[PostSummary]:
    """Return every published post, newest first."""
    return [_summary(post, settings) for post in _load_all(settings)]


@router.get("/blog/{slug}", response_class=HTMLResponse, summary="Render a post page")
@limiter.limit("60/minute")
async def post_page(request: Request, slug: str, settings: Settings = Depends(get_settings)) -> HTMLResponse:
    """Server-render the post published under *slug* as a full HTML document."""
    post = _find(settings, slug)
    meta = build_page_meta(post, settings.site_url, settings.og_path)
    html = render_post_page(post, meta, render_markdown(post.body), settings.site_name)
    return HTMLResponse(content=html)


@router.get("/api/posts/{slug}", response_model=PostResponse, summary="Fetch a rendered post")
@limiter.limit("60/minute")
async def post_detail(request: Request, slug: str, settings: Settings = Depends(get_settings)) -> PostResponse:
    post = _find(settings, slug)
    return PostResponse(
        post=_summary(post, settings),
        meta=build_page_meta(post, settings.site_url, settings.og_path),
        content_html=render_markdown(post.body),
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _summary(post: Post, settings: Settings) -> PostSummary:
    return PostSummary(
        slug=post.slug,
        title=post.title,
        excerpt=post.excerpt or "",
        date=post.date,
        tags=post.tags,
        reading_time=reading_time(post.body),
        og_image=og_image_url(settings.site_url, post.slug, settings.og_path),
    )


def _load_all(settings: Settings) -> List[Post]:
    try:
        return load_posts(settings.posts_dir)
    except PostsDirectoryNotFound as exc:
        logger.error("Cannot list posts: %s", exc)
        raise HTTPException(status_code=503, detail="Post content is unavailable.")


def _find(settings: Settings, slug: str) -> Post:
    try:
        post = get_post(settings.posts_dir, slug)
    except PostsDirectoryNotFound as exc:
        logger.error("Cannot load post %s: %s", slug, exc)
        raise HTTPException(status_code=503, detail="Post content is unavailable.")
    if post is None:
        raise HTTPException(status_code=404, detail=f"No post published as '{slug}'.")
    return post

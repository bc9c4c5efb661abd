from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from folio.models.page_meta import PageMeta


class Post(BaseModel):
    """One blog post: front-matter metadata plus the raw markdown body."""

    model_config = ConfigDict(frozen=True)

    slug: str
    title: str
    excerpt: Optional[str] = None
    date: Optional[str] = None
    tags: List[str] = []
    image: Optional[str] = None
    body: str  # raw markdown, never rewritten after loading
    source: Optional[str] = None  # filename the post was read from


class PostSummary(BaseModel):
    slug: str
    title: str
    excerpt: str
    date: Optional[str] = None
    tags: List[str]
    reading_time: str
    og_image: str


class PostResponse(BaseModel):
    post: PostSummary
    meta: PageMeta
    content_html: str

from typing import List, Literal, Optional

from pydantic import BaseModel


class MetaTag(BaseModel):
    """A single ``<meta>`` element, keyed either by ``name`` or ``property``."""

    attr: Literal["name", "property"]
    key: str
    content: str


class PageMeta(BaseModel):
    title: str
    description: str
    canonical_url: str
    image: Optional[str] = None
    tags: List[MetaTag]

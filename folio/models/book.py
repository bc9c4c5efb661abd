from typing import List, Literal, Optional

from pydantic import BaseModel, Field

BookStatus = Literal["currently-reading", "future", "previously-read"]


class Book(BaseModel):
    """An entry on the reading list."""

    id: str
    title: str
    author: str
    cover: Optional[str] = None
    tags: List[str] = []
    status: BookStatus
    description: Optional[str] = None
    external_link: Optional[str] = Field(default=None, alias="externalLink")
    thoughts: Optional[str] = None

    model_config = {"populate_by_name": True}


class ReadingListResponse(BaseModel):
    currently_reading: List[Book]
    future: List[Book]
    previously_read: List[Book]

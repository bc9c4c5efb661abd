from typing import Literal, NamedTuple, Optional

from pydantic import BaseModel, model_validator

FontStyle = Literal["normal", "italic"]


class FontSource(BaseModel):
    """Where to obtain one font face, tagged with the weight and style it provides."""

    family: str
    weight: int = 400
    style: FontStyle = "normal"
    path: Optional[str] = None
    url: Optional[str] = None

    @model_validator(mode="after")
    def _one_location(self) -> "FontSource":
        if bool(self.path) == bool(self.url):
            raise ValueError("a font source needs exactly one of 'path' or 'url'")
        return self


class FontAsset(NamedTuple):
    name: str
    data: bytes
    weight: int
    style: str

"""Exception hierarchy shared by the post loader, renderer and OG generator."""

from typing import Optional


class FolioError(Exception):
    """Base class for every error raised by folio itself."""


class PostsDirectoryNotFound(FolioError):
    """The configured posts directory does not exist (fatal for a batch run)."""

    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"Posts directory not found: {path}")


class PostParseError(FolioError):
    """A post file could not be parsed (usually malformed front-matter)."""

    def __init__(self, message: str, filename: Optional[str] = None) -> None:
        self.filename = filename
        prefix = f"{filename}: " if filename else ""
        super().__init__(f"{prefix}{message}")


class LayoutError(FolioError):
    """A layout tree violates a structural rule."""


class RasterizationError(FolioError):
    """SVG or PNG rendering of a layout tree failed."""

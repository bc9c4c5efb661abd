"""Runtime configuration resolved from ``FOLIO_*`` environment variables."""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from folio.models.font import FontSource
from folio.services.fonts import FONT_STYLESHEET_URL

# Repository root: content and generated assets live beside the package
ROOT_DIR = Path(__file__).resolve().parent.parent

# Environment variable -> Settings field
_ENV_VARS = {
    "FOLIO_POSTS_DIR": "posts_dir",
    "FOLIO_OG_DIR": "og_dir",
    "FOLIO_READING_LIST": "reading_list_path",
    "FOLIO_SITE_URL": "site_url",
    "FOLIO_SITE_NAME": "site_name",
    "FOLIO_COVERS_BASE": "covers_base",
    "FOLIO_FONT_STYLESHEET": "font_stylesheet",
}


class Settings(BaseModel):
    posts_dir: Path = ROOT_DIR / "content" / "posts"
    og_dir: Path = ROOT_DIR / "public" / "og"
    reading_list_path: Path = ROOT_DIR / "content" / "reading-list.yaml"
    site_url: str = "https://ebadf.me"
    site_name: str = "ebadf.me"
    covers_base: str = "https://ebadf.s3.eu-north-1.amazonaws.com/covers"
    og_path: str = "/og"
    # Explicitly tagged local or remote faces, loaded before the stylesheet ones
    font_sources: List[FontSource] = []
    font_stylesheet: Optional[str] = FONT_STYLESHEET_URL

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings, overriding defaults with any ``FOLIO_*`` variables set."""
        overrides = {
            field: os.environ[name] for name, field in _ENV_VARS.items() if os.environ.get(name)
        }
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()

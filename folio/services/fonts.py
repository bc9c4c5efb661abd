"""Font acquisition for OG card rendering.

Fonts come from explicitly tagged :class:`FontSource` entries (local files or
URLs) and, optionally, from a web-font stylesheet whose ``@font-face`` blocks
are parsed so that every downloaded file carries the weight and style its
block declares. Any single failure is logged and skipped; an empty result is
a valid, degraded outcome.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import httpx

from folio.models.font import FontAsset, FontSource

logger = logging.getLogger(__name__)

MAX_FONT_SIZE = 5 * 1024 * 1024  # 5 MB
TIMEOUT = 10  # seconds
ALLOWED_SCHEMES = {"http", "https"}

FONT_STYLESHEET_URL = "https://fonts.googleapis.com/css2?family=Inter:wght@400;700;800&display=swap"

_FONT_FACE_RE = re.compile(r"@font-face\s*{([^}]*)}", re.IGNORECASE)
_DECLARATION_RE = re.compile(r"([\w-]+)\s*:\s*([^;]+)")
_URL_RE = re.compile(r"url\(\s*['\"]?(https?:[^)'\"]+)['\"]?\s*\)")


def _validate_url(url: str) -> None:
    """Raise ValueError if *url* is not an absolute http(s) URL."""
    parsed = urlparse(url)
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")
    if not parsed.hostname:
        raise ValueError("URL must have a valid hostname.")


def _parse_weight(value: str) -> int:
    # Variable fonts declare a range ("100 900"); use its lower bound
    match = re.search(r"\d+", value)
    return int(match.group(0)) if match else 400


def parse_font_faces(css: str) -> List[FontSource]:
    """Return one tagged source per ``@font-face`` block in *css*.

    Blocks without a usable ``url(...)`` are ignored, as are repeats of a
    (url, weight, style) already seen.
    """
    sources: List[FontSource] = []
    seen: set = set()
    for block in _FONT_FACE_RE.findall(css):
        declarations = {
            name.strip().lower(): value.strip() for name, value in _DECLARATION_RE.findall(block)
        }
        url_match = _URL_RE.search(declarations.get("src", ""))
        if not url_match:
            continue
        family = declarations.get("font-family", "").strip("'\" ")
        style = "italic" if "italic" in declarations.get("font-style", "") else "normal"
        weight = _parse_weight(declarations.get("font-weight", "400"))
        url = url_match.group(1)
        if (url, weight, style) in seen:
            continue
        seen.add((url, weight, style))
        sources.append(FontSource(family=family or "sans-serif", weight=weight, style=style, url=url))
    return sources


async def _fetch_bytes(client: httpx.AsyncClient, url: str) -> bytes:
    """Download *url*, refusing bodies larger than MAX_FONT_SIZE.

    Raises:
        ValueError: if the URL is not http(s).
        httpx.HTTPError: on network or HTTP errors.
        RuntimeError: if the response body exceeds MAX_FONT_SIZE.
    """
    _validate_url(url)
    async with client.stream("GET", url) as response:
        response.raise_for_status()

        content_length = response.headers.get("content-length")
        if content_length and int(content_length) > MAX_FONT_SIZE:
            raise RuntimeError("Font file exceeds the maximum allowed size.")

        chunks = []
        total = 0
        async for chunk in response.aiter_bytes():
            total += len(chunk)
            if total > MAX_FONT_SIZE:
                raise RuntimeError("Font file exceeds the maximum allowed size.")
            chunks.append(chunk)
        return b"".join(chunks)


async def _load_source(client: httpx.AsyncClient, source: FontSource) -> Optional[FontAsset]:
    location = source.path or source.url
    try:
        if source.path:
            data = Path(source.path).read_bytes()
        else:
            data = await _fetch_bytes(client, source.url)
    except (OSError, ValueError, httpx.HTTPError, RuntimeError) as exc:
        logger.warning("Failed to load font %s (%s %s): %s", location, source.family, source.weight, exc)
        return None
    return FontAsset(name=source.family, data=data, weight=source.weight, style=source.style)


async def fetch_stylesheet_sources(client: httpx.AsyncClient, stylesheet_url: str) -> List[FontSource]:
    """Fetch a web-font stylesheet and return the font faces it declares.

    Returns an empty list (after logging a warning) if the stylesheet cannot
    be retrieved.
    """
    try:
        css = (await _fetch_bytes(client, stylesheet_url)).decode(errors="replace")
    except (ValueError, httpx.HTTPError, RuntimeError) as exc:
        logger.warning("Failed to fetch font stylesheet %s: %s", stylesheet_url, exc)
        return []
    return parse_font_faces(css)


async def load_fonts(
    sources: Sequence[FontSource] = (),
    stylesheet_url: Optional[str] = FONT_STYLESHEET_URL,
    client: Optional[httpx.AsyncClient] = None,
) -> List[FontAsset]:
    """Assemble the font set for one generation run.

    Explicit *sources* come first, followed by the faces declared in the
    stylesheet at *stylesheet_url* (skipped when it is *None*). Downloads run
    concurrently; the returned order follows the source order.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=TIMEOUT, follow_redirects=True)
    try:
        all_sources = list(sources)
        if stylesheet_url:
            all_sources += await fetch_stylesheet_sources(client, stylesheet_url)
        results = await asyncio.gather(*(_load_source(client, source) for source in all_sources))
    finally:
        if owns_client:
            await client.aclose()

    fonts = [font for font in results if font is not None]
    logger.info("Loaded %d of %d font faces", len(fonts), len(all_sources))
    return fonts

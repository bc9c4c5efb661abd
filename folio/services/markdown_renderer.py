"""Markdown to HTML rendering with presentational element overrides."""

import logging

import markdown
from bs4 import BeautifulSoup, Tag

from folio.services.overrides import DEFAULT_OVERRIDES, OverrideTable

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "md_in_html", "sane_lists"]


def markdown_to_html(text: str) -> str:
    """Render *text* with the standard markdown semantics and no overrides."""
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)


def _rewrite(element: Tag, soup: BeautifulSoup, overrides: OverrideTable) -> None:
    """Apply *overrides* to *element*'s subtree, children before their parent."""
    for child in list(element.children):
        if isinstance(child, Tag):
            _rewrite(child, soup, overrides)

    handler = overrides.get(element.name)
    if handler is None:
        return

    # A failing override must not break the page: keep the default rendering.
    try:
        replacement = handler(element, soup)
    except Exception as exc:
        logger.warning("Override for <%s> failed, using default rendering: %s", element.name, exc)
        return

    if replacement is not None and replacement is not element and element.parent is not None:
        element.replace_with(replacement)


def apply_overrides(html: str, overrides: OverrideTable = DEFAULT_OVERRIDES) -> str:
    """Rewrite the elements of an HTML fragment listed in *overrides*."""
    soup = BeautifulSoup(html, "lxml")
    root = soup.body or soup
    for child in list(root.children):
        if isinstance(child, Tag):
            _rewrite(child, soup, overrides)
    return root.decode_contents()


def render_markdown(text: str, overrides: OverrideTable = DEFAULT_OVERRIDES) -> str:
    """Render a markdown document to HTML, substituting the override components."""
    return apply_overrides(markdown_to_html(text), overrides)

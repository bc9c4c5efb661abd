"""Presentational overrides applied to rendered markdown, keyed by element name.

Each handler receives an element whose children have already been rewritten
and the soup that owns it. It returns the node that should take the
element's place, or *None* to keep the element exactly as it is.
"""

import re
from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

Handler = Callable[[Tag, BeautifulSoup], Optional[Tag]]
OverrideTable = Mapping[str, Handler]

SUMMARY_MARKER = "data-accordion-summary"
DEFAULT_NOTE_TITLE = "Note"
DEFAULT_ACCORDION_TITLE = "Notes"

_NOTE_TITLE_RE = re.compile(r"title=([^ ]+)")
_LANGUAGE_RE = re.compile(r"\b(?:lang|language)-([A-Za-z0-9_-]+)\b", re.IGNORECASE)

_TABLE_WRAPPER_CLASSES = ["my-8", "overflow-x-auto", "rounded-lg", "border", "border-border", "shadow-sm"]
_TABLE_CLASSES = ["min-w-full", "divide-y", "divide-border"]
_THEAD_CLASSES = ["bg-muted/70"]
_TBODY_CLASSES = ["divide-y", "divide-border", "bg-background"]
_TR_CLASSES = ["hover:bg-muted/40", "transition-colors", "duration-150"]
_TH_CLASSES = [
    "px-6", "py-4", "text-left", "text-xs", "font-semibold", "text-foreground",
    "uppercase", "tracking-wider", "border-b-2", "border-border",
]
_TD_CLASSES = ["px-6", "py-4", "text-sm", "text-foreground/90"]
_LINK_CLASSES = ["text-blue-600", "dark:text-blue-400", "hover:underline", "transition-colors", "link"]
_BLOCKQUOTE_CLASSES = ["border-l-1", "pl-4", "py-2", "my-4", "bg-muted/50", "border-primary", "rounded-lg"]
_LINK_REL = ["noopener", "noreferrer"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def class_string(element: Tag) -> str:
    """Return the element's class attribute as one space-separated string."""
    value = element.get("class", "")
    if isinstance(value, str):
        return value
    return " ".join(value)


def _merge_classes(fixed: List[str], element: Tag) -> List[str]:
    extra = [c for c in class_string(element).split() if c not in fixed]
    return [*fixed, *extra]


def extract_language(class_attr: str) -> Optional[str]:
    """Return the language named by a ``language-<x>`` / ``lang-<x>`` class."""
    match = _LANGUAGE_RE.search(class_attr or "")
    return match.group(1) if match else None


def flatten_text(children: Union[str, Iterable]) -> str:
    """Collapse a string or a sequence of child nodes into plain text."""
    if isinstance(children, str):
        return str(children)
    parts = []
    for child in children:
        if isinstance(child, Tag):
            parts.append(child.get_text())
        elif child is not None:
            parts.append(str(child))
    return "".join(parts)


def _move_children(source: Iterable, target: Tag) -> None:
    for child in list(source):
        target.append(child.extract())


# ---------------------------------------------------------------------------
# Callouts and accordions
# ---------------------------------------------------------------------------

def render_note(element: Tag, soup: BeautifulSoup) -> Optional[Tag]:
    """Turn ``<div class="note ...">`` into a callout; other divs are untouched."""
    classes = class_string(element)
    if "note" not in classes:
        return None

    if "warning" in classes:
        variant = "warning"
    elif "tip" in classes:
        variant = "tip"
    else:
        variant = "info"
    match = _NOTE_TITLE_RE.search(classes)
    title = match.group(1) if match else DEFAULT_NOTE_TITLE

    callout = soup.new_tag("aside", attrs={"class": ["note", f"note-{variant}"], "role": "note"})
    callout["data-variant"] = variant
    heading = soup.new_tag("p", attrs={"class": "note-title"})
    heading.string = title
    body = soup.new_tag("div", attrs={"class": "note-content"})
    _move_children(element.contents, body)
    callout.append(heading)
    callout.append(body)
    return callout


def render_summary(element: Tag, soup: BeautifulSoup) -> Tag:
    marker = soup.new_tag("span")
    marker[SUMMARY_MARKER] = "true"
    _move_children(element.contents, marker)
    return marker


def _is_summary_marker(node) -> bool:
    return isinstance(node, Tag) and node.get(SUMMARY_MARKER) == "true"


def render_details(element: Tag, soup: BeautifulSoup) -> Tag:
    """Wrap a ``<details>`` block in the accordion component.

    Only the first summary marker among the direct children becomes the
    title; any later ones stay in the body as ordinary content.
    """
    marker = next((child for child in element.children if _is_summary_marker(child)), None)

    accordion = soup.new_tag("details", attrs={"class": "accordion"})
    trigger = soup.new_tag("summary", attrs={"class": "accordion-trigger"})
    if marker is not None:
        marker.extract()
        _move_children(marker.contents, trigger)
    else:
        trigger.string = element.get("title") or DEFAULT_ACCORDION_TITLE

    body = soup.new_tag("div", attrs={"class": "accordion-content"})
    _move_children(element.contents, body)
    accordion.append(trigger)
    accordion.append(body)
    return accordion


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def _styled(fixed: List[str]) -> Handler:
    def handler(element: Tag, soup: BeautifulSoup) -> Tag:
        element["class"] = _merge_classes(fixed, element)
        return element

    return handler


def render_table(element: Tag, soup: BeautifulSoup) -> Tag:
    table = soup.new_tag("table", attrs=dict(element.attrs))
    table["class"] = _merge_classes(_TABLE_CLASSES, element)
    _move_children(element.contents, table)
    wrapper = soup.new_tag("div", attrs={"class": list(_TABLE_WRAPPER_CLASSES)})
    wrapper.append(table)
    return wrapper


# ---------------------------------------------------------------------------
# Links, quotes and code
# ---------------------------------------------------------------------------

def render_link(element: Tag, soup: BeautifulSoup) -> Tag:
    element["class"] = _merge_classes(_LINK_CLASSES, element)
    element["target"] = "_blank"
    element["rel"] = list(_LINK_REL)
    return element


def render_blockquote(element: Tag, soup: BeautifulSoup) -> Tag:
    element["class"] = _merge_classes(_BLOCKQUOTE_CLASSES, element)
    return element


def _highlighted(soup: BeautifulSoup, content: str, language: Optional[str]) -> Tag:
    try:
        lexer = get_lexer_by_name(language) if language else TextLexer()
    except ClassNotFound:
        lexer = TextLexer()
    markup = highlight(content, lexer, HtmlFormatter(nowrap=True))

    code = soup.new_tag("code")
    if language:
        code["class"] = [f"language-{language}"]
    fragment = BeautifulSoup(markup, "html.parser")
    _move_children(fragment.contents, code)
    return code


def render_code_block(soup: BeautifulSoup, content: str, language: Optional[str]) -> Tag:
    """Build the syntax-highlighted code block component."""
    block = soup.new_tag("div", attrs={"class": "code-block"})
    if language:
        block["data-language"] = language
        header = soup.new_tag("div", attrs={"class": "code-block-header"})
        label = soup.new_tag("span", attrs={"class": "code-block-language"})
        label.string = language
        header.append(label)
        block.append(header)

    pre = soup.new_tag("pre", attrs={"class": "highlight"})
    pre.append(_highlighted(soup, content.rstrip("\n"), language))
    block.append(pre)
    return block


def render_code(element: Tag, soup: BeautifulSoup) -> Tag:
    """Multi-line or language-tagged code becomes a block; anything else stays inline."""
    content = flatten_text(element.contents)
    classes = class_string(element)
    language = extract_language(classes)

    if "\n" in content or language:
        return render_code_block(soup, content, language)

    inline = soup.new_tag("code", attrs=dict(element.attrs))
    inline["class"] = ["inline-code", *classes.split()]
    inline.string = content
    return inline


def render_pre(element: Tag, soup: BeautifulSoup) -> Optional[Tag]:
    """Drop the ``<pre>`` markdown puts around a code block that was already expanded."""
    children = [
        child
        for child in element.contents
        if not (isinstance(child, NavigableString) and not child.strip())
    ]
    if len(children) == 1 and isinstance(children[0], Tag) and "code-block" in class_string(children[0]):
        return children[0].extract()
    return None


# ---------------------------------------------------------------------------
# Table of overrides
# ---------------------------------------------------------------------------

def build_override_table(extra: Optional[Mapping[str, Handler]] = None) -> OverrideTable:
    """Return the read-only element-name -> handler mapping used for rendering."""
    table = {
        "div": render_note,
        "summary": render_summary,
        "details": render_details,
        "table": render_table,
        "thead": _styled(_THEAD_CLASSES),
        "tbody": _styled(_TBODY_CLASSES),
        "tr": _styled(_TR_CLASSES),
        "th": _styled(_TH_CLASSES),
        "td": _styled(_TD_CLASSES),
        "a": render_link,
        "code": render_code,
        "pre": render_pre,
        "blockquote": render_blockquote,
    }
    if extra:
        table.update(extra)
    return MappingProxyType(table)


DEFAULT_OVERRIDES: OverrideTable = build_override_table()

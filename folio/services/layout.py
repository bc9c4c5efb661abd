"""OG card layout: the card's node tree and a small flexbox layout pass.

The layout pass supports what the card needs: fixed or percentage sizes,
uniform padding, top/bottom margins, ``row``/``column`` flow,
``justify_content`` (``flex-start``, ``center``, ``flex-end``,
``space-between``) and word wrapping measured against the real font metrics.
"""

import io
import logging
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from PIL import ImageFont

from folio.models.font import FontAsset
from folio.models.layout import LayoutNode

logger = logging.getLogger(__name__)

CARD_WIDTH = 1200
CARD_HEIGHT = 630
CARD_BACKGROUND = "linear-gradient(135deg,#0ea5a0,#7c3aed)"

DEFAULT_LINE_HEIGHT = 1.2
DEFAULT_FONT_SIZE = 16
DEFAULT_COLOR = "#000000"


# ---------------------------------------------------------------------------
# Node construction
# ---------------------------------------------------------------------------

def container(style: Dict, children: Sequence[LayoutNode], key: Optional[str] = None) -> LayoutNode:
    return LayoutNode(kind="container", style=style, children=list(children), key=key)


def text(style: Dict, value: str, key: Optional[str] = None) -> LayoutNode:
    return LayoutNode(kind="text", style=style, children=value, key=key)


def build_card_layout(title: str, excerpt: str, site_name: str) -> LayoutNode:
    """Return the node tree of a post's OG card.

    A full-bleed gradient panel holds one column with three keyed blocks, in
    this order: the site identifier, the title and the excerpt.
    """
    column = container(
        {
            "flex_direction": "column",
            "justify_content": "space-between",
            "width": "100%",
        },
        [
            text({"font_size": 20, "opacity": 0.95, "font_weight": 600, "margin_bottom": 12}, site_name, key="meta"),
            text({"font_size": 56, "line_height": 1.05, "font_weight": 800, "margin_bottom": 18}, title, key="title"),
            text({"font_size": 24, "opacity": 0.95}, excerpt, key="excerpt"),
        ],
        key="column",
    )
    return container(
        {
            "flex_direction": "row",
            "width": CARD_WIDTH,
            "height": CARD_HEIGHT,
            "background": CARD_BACKGROUND,
            "color": "white",
            "padding": 64,
        },
        [column],
        key="card",
    )


# ---------------------------------------------------------------------------
# Text measurement
# ---------------------------------------------------------------------------

class TextMeasurer:
    """Measures strings with the closest available font face.

    Falls back to Pillow's built-in font when no usable face was supplied.
    """

    def __init__(self, fonts: Sequence[FontAsset] = ()) -> None:
        self.fonts = list(fonts)
        self._cache: Dict[Tuple[int, int, str], ImageFont.ImageFont] = {}

    def _pick(self, weight: int, style: str) -> Optional[FontAsset]:
        candidates = [f for f in self.fonts if f.style == style] or self.fonts
        if not candidates:
            return None
        return min(candidates, key=lambda f: abs(f.weight - weight))

    def font(self, size: int, weight: int = 400, style: str = "normal"):
        cache_key = (size, weight, style)
        if cache_key not in self._cache:
            asset = self._pick(weight, style)
            loaded = None
            if asset is not None:
                try:
                    loaded = ImageFont.truetype(io.BytesIO(asset.data), size)
                except OSError as exc:
                    logger.warning("Unusable font data for %s %s: %s", asset.name, asset.weight, exc)
            self._cache[cache_key] = loaded or ImageFont.load_default(size=size)
        return self._cache[cache_key]

    def width(self, value: str, size: int, weight: int = 400, style: str = "normal") -> float:
        return self.font(size, weight, style).getlength(value)

    def metrics(self, size: int, weight: int = 400, style: str = "normal") -> Tuple[int, int]:
        """Return (ascent, descent) in pixels."""
        font = self.font(size, weight, style)
        if hasattr(font, "getmetrics"):
            return font.getmetrics()
        return int(size * 0.8), int(size * 0.2)

    def wrap(self, value: str, max_width: float, size: int, weight: int = 400, style: str = "normal") -> List[str]:
        """Greedy word wrap of *value* into lines no wider than *max_width*.

        A single word wider than *max_width* gets a line of its own.
        """
        lines: List[str] = []
        for paragraph in value.splitlines() or [""]:
            current = ""
            for word in paragraph.split():
                candidate = f"{current} {word}" if current else word
                if current and self.width(candidate, size, weight, style) > max_width:
                    lines.append(current)
                    current = word
                else:
                    current = candidate
            lines.append(current)
        return lines


# ---------------------------------------------------------------------------
# Layout pass
# ---------------------------------------------------------------------------

class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float


class PlacedText(NamedTuple):
    """A text block after layout: wrapped lines with their baselines."""

    key: Optional[str]
    lines: List[str]
    baselines: List[float]
    x: float
    font_size: int
    font_weight: int
    font_style: str
    color: str
    opacity: float


class PlacedBox(NamedTuple):
    key: Optional[str]
    rect: Rect
    background: Optional[str]


class LayoutResult(NamedTuple):
    boxes: List[PlacedBox]
    texts: List[PlacedText]


_INHERITED = ("color", "font_style")


def _length(value, available: float) -> Optional[float]:
    """Resolve a px number, ``"<n>px"`` or ``"<n>%"`` against *available*."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    value = str(value).strip()
    if value.endswith("%"):
        return available * float(value[:-1]) / 100
    if value.endswith("px"):
        value = value[:-2]
    return float(value)


def _inherit(parent: Dict, style: Dict) -> Dict:
    merged = {name: parent[name] for name in _INHERITED if name in parent}
    merged.update({name: style[name] for name in _INHERITED if name in style})
    return merged


class _Layout:
    def __init__(self, measurer: TextMeasurer) -> None:
        self.measurer = measurer
        self.boxes: List[PlacedBox] = []
        self.texts: List[PlacedText] = []

    # -- sizing ------------------------------------------------------------

    def _text_lines(self, node: LayoutNode, width: float) -> List[str]:
        style = node.style
        return self.measurer.wrap(
            node.children,
            width,
            int(style.get("font_size", DEFAULT_FONT_SIZE)),
            int(style.get("font_weight", 400)),
            style.get("font_style", "normal"),
        )

    def _text_height(self, node: LayoutNode, width: float) -> float:
        size = int(node.style.get("font_size", DEFAULT_FONT_SIZE))
        line_height = size * float(node.style.get("line_height", DEFAULT_LINE_HEIGHT))
        return len(self._text_lines(node, width)) * line_height

    def outer_height(self, node: LayoutNode, width: float, available_height: float) -> float:
        """Height *node* occupies in a column, margins included."""
        style = node.style
        margins = float(style.get("margin_top", 0)) + float(style.get("margin_bottom", 0))
        explicit = _length(style.get("height"), available_height)
        if explicit is not None:
            return explicit + margins
        if node.kind == "text":
            return self._text_height(node, width) + margins

        padding = float(style.get("padding", 0))
        inner_width = (_length(style.get("width"), width) or width) - 2 * padding
        child_heights = [self.outer_height(child, inner_width, available_height) for child in node.children]
        if node.direction == "row":
            content = max(child_heights, default=0)
        else:
            content = sum(child_heights)
        return content + 2 * padding + margins

    # -- placement ---------------------------------------------------------

    def place(self, node: LayoutNode, rect: Rect, inherited: Dict) -> None:
        style = node.style
        cascade = _inherit(inherited, style)
        if node.kind == "text":
            self._place_text(node, rect, cascade)
            return

        self.boxes.append(PlacedBox(node.key, rect, style.get("background")))
        padding = float(style.get("padding", 0))
        inner = Rect(rect.x + padding, rect.y + padding, rect.width - 2 * padding, rect.height - 2 * padding)
        if node.direction == "row":
            self._place_row(node.children, inner, cascade)
        else:
            self._place_column(node.children, inner, style.get("justify_content", "flex-start"), cascade)

    def _place_column(self, children: List[LayoutNode], inner: Rect, justify: str, cascade: Dict) -> None:
        widths = [_length(child.style.get("width"), inner.width) or inner.width for child in children]
        heights = [self.outer_height(child, w, inner.height) for child, w in zip(children, widths)]
        free = max(0.0, inner.height - sum(heights))

        gap = 0.0
        y = inner.y
        if justify == "space-between" and len(children) > 1:
            gap = free / (len(children) - 1)
        elif justify == "center":
            y += free / 2
        elif justify == "flex-end":
            y += free

        for child, width, height in zip(children, widths, heights):
            top = float(child.style.get("margin_top", 0))
            bottom = float(child.style.get("margin_bottom", 0))
            self.place(child, Rect(inner.x, y + top, width, height - top - bottom), cascade)
            y += height + gap

    def _place_row(self, children: List[LayoutNode], inner: Rect, cascade: Dict) -> None:
        fixed = [_length(child.style.get("width"), inner.width) for child in children]
        flexible = [w for w in fixed if w is None]
        remaining = inner.width - sum(w for w in fixed if w is not None)
        share = remaining / len(flexible) if flexible else 0.0

        x = inner.x
        for child, width in zip(children, fixed):
            width = width if width is not None else share
            self.place(child, Rect(x, inner.y, width, inner.height), cascade)
            x += width

    def _place_text(self, node: LayoutNode, rect: Rect, cascade: Dict) -> None:
        style = node.style
        size = int(style.get("font_size", DEFAULT_FONT_SIZE))
        weight = int(style.get("font_weight", 400))
        font_style = cascade.get("font_style", "normal")
        line_height = size * float(style.get("line_height", DEFAULT_LINE_HEIGHT))
        ascent, descent = self.measurer.metrics(size, weight, font_style)
        leading = (line_height - (ascent + descent)) / 2

        lines = self._text_lines(node, rect.width)
        baselines = [rect.y + i * line_height + leading + ascent for i in range(len(lines))]
        self.texts.append(
            PlacedText(
                key=node.key,
                lines=lines,
                baselines=baselines,
                x=rect.x,
                font_size=size,
                font_weight=weight,
                font_style=font_style,
                color=cascade.get("color", DEFAULT_COLOR),
                opacity=float(style.get("opacity", 1)),
            )
        )


def compute_layout(
    root: LayoutNode, width: int, height: int, measurer: Optional[TextMeasurer] = None
) -> LayoutResult:
    """Lay *root* out on a *width* x *height* canvas."""
    engine = _Layout(measurer or TextMeasurer())
    engine.place(root, Rect(0, 0, width, height), {})
    return LayoutResult(engine.boxes, engine.texts)

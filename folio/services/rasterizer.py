"""Rendering laid-out OG cards to PNG.

The card background (panels and gradients) is drawn as SVG and rasterised
with CairoSVG. Text is then painted on top with Pillow, using the same font
faces that measured it during layout, so wrapping and glyphs always agree.
"""

import io
import logging
import math
import re
from typing import List, Optional, Sequence, Tuple

from lxml import etree
from PIL import Image, ImageColor, ImageDraw

from folio.errors import RasterizationError
from folio.models.font import FontAsset
from folio.models.layout import LayoutNode
from folio.services.layout import CARD_HEIGHT, CARD_WIDTH, LayoutResult, TextMeasurer, compute_layout

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"

_GRADIENT_RE = re.compile(r"linear-gradient\((.*)\)", re.IGNORECASE)
_ANGLE_RE = re.compile(r"^(-?[\d.]+)deg$")
_STOP_RE = re.compile(r"^(\S+)(?:\s+([\d.]+)%)?$")


def _q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def parse_linear_gradient(value: str) -> Optional[Tuple[float, List[Tuple[str, float]]]]:
    """Parse ``linear-gradient(<angle>deg, <color> [<pct>%], ...)``.

    Returns ``(angle_degrees, [(color, offset 0..1), ...])`` or *None* when
    *value* is not a linear gradient. Stops without a position are spread
    evenly.
    """
    match = _GRADIENT_RE.match(value.strip())
    if not match:
        return None
    parts = [part.strip() for part in match.group(1).split(",") if part.strip()]
    angle = 180.0  # CSS default: to bottom
    angle_match = _ANGLE_RE.match(parts[0]) if parts else None
    if angle_match:
        angle = float(angle_match.group(1))
        parts = parts[1:]
    if not parts:
        return None

    stops = []
    for index, part in enumerate(parts):
        stop = _STOP_RE.match(part)
        color = stop.group(1) if stop else part
        if stop and stop.group(2) is not None:
            offset = float(stop.group(2)) / 100
        else:
            offset = index / (len(parts) - 1) if len(parts) > 1 else 0.0
        stops.append((color, offset))
    return angle, stops


def _gradient_element(defs, gradient_id: str, angle: float, stops) -> None:
    # CSS angles run clockwise from "to top"
    dx = math.sin(math.radians(angle))
    dy = -math.cos(math.radians(angle))
    gradient = etree.SubElement(
        defs,
        _q("linearGradient"),
        id=gradient_id,
        x1=_fmt(0.5 - dx / 2),
        y1=_fmt(0.5 - dy / 2),
        x2=_fmt(0.5 + dx / 2),
        y2=_fmt(0.5 + dy / 2),
    )
    for color, offset in stops:
        etree.SubElement(gradient, _q("stop"), offset=_fmt(offset), attrib={"stop-color": color})


def layout_to_svg(result: LayoutResult, width: int, height: int) -> bytes:
    """Serialise the painted boxes of a computed layout as an SVG document.

    Text is not part of the SVG; :func:`draw_text` paints it afterwards.
    """
    svg = etree.Element(
        _q("svg"),
        nsmap={None: SVG_NS},
        width=str(width),
        height=str(height),
        viewBox=f"0 0 {width} {height}",
    )
    defs = etree.SubElement(svg, _q("defs"))

    for index, box in enumerate(result.boxes):
        if not box.background:
            continue
        rect = box.rect
        gradient = parse_linear_gradient(box.background)
        if gradient is not None:
            gradient_id = f"bg-{box.key or index}"
            _gradient_element(defs, gradient_id, *gradient)
            fill = f"url(#{gradient_id})"
        else:
            fill = box.background
        etree.SubElement(
            svg,
            _q("rect"),
            x=_fmt(rect.x),
            y=_fmt(rect.y),
            width=_fmt(rect.width),
            height=_fmt(rect.height),
            fill=fill,
        )

    return etree.tostring(svg, xml_declaration=True, encoding="utf-8")


def render_svg(
    root: LayoutNode,
    width: int = CARD_WIDTH,
    height: int = CARD_HEIGHT,
    fonts: Sequence[FontAsset] = (),
) -> bytes:
    """Lay *root* out and return the SVG of its background."""
    result = compute_layout(root, width, height, TextMeasurer(fonts))
    return layout_to_svg(result, width, height)


def svg_to_png(svg: bytes, width: int = CARD_WIDTH, height: int = CARD_HEIGHT) -> bytes:
    """Rasterise *svg* to a PNG of exactly *width* x *height* pixels.

    Raises:
        RasterizationError: if CairoSVG cannot render the document.
    """
    # cairosvg loads the native cairo library on import
    import cairosvg

    try:
        return cairosvg.svg2png(bytestring=svg, output_width=width, output_height=height)
    except Exception as exc:
        raise RasterizationError(f"SVG to PNG conversion failed: {exc}") from exc


def _rgba(color: str, opacity: float) -> Tuple[int, int, int, int]:
    red, green, blue = ImageColor.getrgb(color)[:3]
    return red, green, blue, round(255 * max(0.0, min(1.0, opacity)))


def draw_text(png: bytes, result: LayoutResult, measurer: TextMeasurer) -> bytes:
    """Paint the text blocks of *result* onto the PNG image *png*.

    Each line is drawn with the face *measurer* used to wrap it, with its
    baseline at the position the layout pass computed.

    Raises:
        RasterizationError: if *png* is not a readable image.
    """
    try:
        with Image.open(io.BytesIO(png)) as source:
            canvas = source.convert("RGBA")
    except OSError as exc:
        raise RasterizationError(f"Background image is unreadable: {exc}") from exc

    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for block in result.texts:
        font = measurer.font(block.font_size, block.font_weight, block.font_style)
        ascent, _ = measurer.metrics(block.font_size, block.font_weight, block.font_style)
        fill = _rgba(block.color, block.opacity)
        for line, baseline in zip(block.lines, block.baselines):
            if line:
                draw.text((block.x, baseline - ascent), line, font=font, fill=fill)

    buffer = io.BytesIO()
    Image.alpha_composite(canvas, overlay).convert("RGB").save(buffer, format="PNG")
    return buffer.getvalue()


def render_card_png(
    root: LayoutNode,
    width: int = CARD_WIDTH,
    height: int = CARD_HEIGHT,
    fonts: Sequence[FontAsset] = (),
) -> bytes:
    """Lay out *root* and render it as a *width* x *height* PNG.

    An empty *fonts* set is allowed: a warning is logged and text is measured
    and drawn with Pillow's default face.
    """
    if not fonts:
        logger.warning("No fonts loaded; OG text will render with fallback glyphs")
    measurer = TextMeasurer(fonts)
    result = compute_layout(root, width, height, measurer)
    background = svg_to_png(layout_to_svg(result, width, height), width, height)
    return draw_text(background, result, measurer)

from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from config import (
    settings,
    ALIGN_COLOR,
    ALIGN_TEXT,
    GUIDE_COLOR,
    GUIDE_TEXT,
    READY_COLOR,
    READY_TEXT,
    TEXT_FILL,
    TEXT_STROKE,
)
from .models import DetectedDocument

OUTLINE_WIDTH = 4
CORNER_RADIUS = 8
GUIDE_WIDTH = 3
DASH = 10
BRACKET_LENGTH = 30
STATUS_FONT_SIZE = 20
GUIDE_FONT_SIZE = 18
STATUS_BASELINE = 40


def new_surface(width: int, height: int) -> Image.Image:
    """Fully transparent RGBA drawing surface"""
    return Image.new("RGBA", (width, height), (0, 0, 0, 0))


def _font(size: int):
    return ImageFont.load_default(size=size)


def _centered_text(draw: ImageDraw.ImageDraw, width: int, baseline: float, text: str, size: int):
    font = _font(size)
    text_width = draw.textlength(text, font=font)
    x = (width - text_width) / 2
    draw.text(
        (x, baseline - size),
        text,
        font=font,
        fill=TEXT_FILL,
        stroke_width=3,
        stroke_fill=TEXT_STROKE,
    )


def _dashed_line(draw: ImageDraw.ImageDraw, start: Tuple[float, float], end: Tuple[float, float],
                 fill, width: int, dash: int = DASH):
    (x0, y0), (x1, y1) = start, end
    length = max(abs(x1 - x0), abs(y1 - y0))
    if length == 0:
        return
    ux, uy = (x1 - x0) / length, (y1 - y0) / length
    pos = 0.0
    while pos < length:
        stop = min(pos + dash, length)
        draw.line(
            [(x0 + ux * pos, y0 + uy * pos), (x0 + ux * stop, y0 + uy * stop)],
            fill=fill,
            width=width,
        )
        pos += 2 * dash


def _draw_detection(draw: ImageDraw.ImageDraw, width: int, detected: DetectedDocument):
    ready = detected.confidence > settings.READY_CONFIDENCE
    color = READY_COLOR if ready else ALIGN_COLOR
    corners = [(p.x, p.y) for p in detected.corners]

    draw.line(corners + corners[:1], fill=color, width=OUTLINE_WIDTH, joint="curve")

    for x, y in corners:
        draw.ellipse(
            (x - CORNER_RADIUS, y - CORNER_RADIUS, x + CORNER_RADIUS, y + CORNER_RADIUS),
            fill=color,
        )

    text = READY_TEXT if ready else ALIGN_TEXT
    _centered_text(draw, width, STATUS_BASELINE, text, STATUS_FONT_SIZE)


def _draw_guide(draw: ImageDraw.ImageDraw, width: int, height: int):
    padding = min(width, height) * 0.1
    left, top = padding, padding
    right, bottom = width - padding, height - padding

    frame_edges: Sequence = [
        ((left, top), (right, top)),
        ((right, top), (right, bottom)),
        ((right, bottom), (left, bottom)),
        ((left, bottom), (left, top)),
    ]
    for start, end in frame_edges:
        _dashed_line(draw, start, end, GUIDE_COLOR, GUIDE_WIDTH)

    n = BRACKET_LENGTH
    brackets = [
        [(left, top + n), (left, top), (left + n, top)],
        [(right - n, top), (right, top), (right, top + n)],
        [(left, bottom - n), (left, bottom), (left + n, bottom)],
        [(right - n, bottom), (right, bottom), (right, bottom - n)],
    ]
    for bracket in brackets:
        draw.line(bracket, fill=TEXT_FILL, width=OUTLINE_WIDTH)

    _centered_text(draw, width, height - padding / 2, GUIDE_TEXT, GUIDE_FONT_SIZE)


def draw_document_overlay(surface: Image.Image, width: int, height: int,
                          detected: Optional[DetectedDocument]) -> None:
    """
    Redraw the live-feedback overlay.

    Clears the surface, then draws the detected quadrilateral with corner
    markers and a status line, or a dashed framing guide when nothing was
    detected.
    """
    surface.paste((0, 0, 0, 0), (0, 0, width, height))
    draw = ImageDraw.Draw(surface)

    if detected is not None and len(detected.corners) == 4:
        _draw_detection(draw, width, detected)
    else:
        _draw_guide(draw, width, height)

"""
Pillow backend for grid overlay frames.

Draws the primitives of a Frame onto an RGB image. Rendering happens at a
supersampled resolution and is downscaled with LANCZOS so thin grid lines and
small labels come out anti-aliased.
"""

import logging
import math
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from constants import COLORS, LABEL_FONT_SIZE, RASTER_SUPERSAMPLE
from grid_renderer import (
    Frame,
    FillRect,
    StrokeRect,
    GridLine,
    FillCircle,
    StrokeCircle,
    RadialGlow,
    TextLabel,
)

logger = logging.getLogger(__name__)

GLOW_STEPS = 12

# Label fonts, tried in order; Pillow's built-in font is the last resort
LABEL_FONT_CANDIDATES = (
    "DejaVuSansMono.ttf",
    "DejaVuSans.ttf",
    "Menlo.ttc",
    "Arial.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
)


def find_label_font(candidates: Sequence[str] = LABEL_FONT_CANDIDATES) -> Optional[str]:
    """First TrueType font in ``candidates`` that Pillow can open, or None."""
    for name in candidates:
        try:
            ImageFont.truetype(name, LABEL_FONT_SIZE)
        except OSError:
            continue
        return name
    logger.debug("No TrueType label font found, using Pillow default")
    return None


def _rgba(color: Tuple[int, int, int], alpha: float) -> Tuple[int, int, int, int]:
    a = int(round(max(0.0, min(1.0, alpha)) * 255))
    return (color[0], color[1], color[2], a)


def dash_segments(start: Sequence[float], end: Sequence[float],
                  dash: Tuple[float, float]) -> list:
    """Split a line into (start, end) pieces following an on/off dash pattern."""
    on, off = dash
    p1 = np.asarray(start, dtype=np.float64)
    p2 = np.asarray(end, dtype=np.float64)
    length = float(np.linalg.norm(p2 - p1))
    if length == 0 or on <= 0:
        return []

    direction = (p2 - p1) / length
    pieces = []
    pos = 0.0
    while pos < length:
        seg_end = min(pos + on, length)
        a = p1 + direction * pos
        b = p1 + direction * seg_end
        pieces.append(((float(a[0]), float(a[1])), (float(b[0]), float(b[1]))))
        pos = seg_end + off
    return pieces


class RasterRenderer:
    """Rasterizes overlay frames with Pillow.

    Args:
        width, height: Output image size in pixels
        supersample: Internal resolution multiplier
        background: RGB fill behind the grid
    """

    def __init__(self, width: int, height: int, supersample: int = RASTER_SUPERSAMPLE,
                 background: Tuple[int, int, int] = COLORS.BACKGROUND):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid raster size {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self._supersample = max(1, int(supersample))
        self.background = background
        self._font_path = find_label_font()
        self._fonts: Dict[int, ImageFont.ImageFont] = {}

    def _font(self, size: float) -> ImageFont.ImageFont:
        """Label font at a pixel size, loaded once per size."""
        px = max(1, int(size))
        if px not in self._fonts:
            if self._font_path is None:
                self._fonts[px] = ImageFont.load_default()
            else:
                self._fonts[px] = ImageFont.truetype(self._font_path, px)
        return self._fonts[px]

    def _scale(self, point: Sequence[float]) -> Tuple[float, float]:
        s = self._supersample
        return (point[0] * s, point[1] * s)

    def _width(self, width: float) -> int:
        return max(1, int(round(width * self._supersample)))

    def render(self, frame: Frame) -> np.ndarray:
        """
        Draw a frame.

        Args:
            frame: Output of GridRenderer.render

        Returns:
            RGB image array of shape (height, width, 3)
        """
        s = self._supersample
        img = Image.new('RGB', (self.width * s, self.height * s), self.background)
        draw = ImageDraw.Draw(img, 'RGBA')

        for prim in frame.primitives:
            if isinstance(prim, FillRect):
                draw.polygon([self._scale(p) for p in prim.corners], fill=_rgba(prim.color, prim.alpha))
            elif isinstance(prim, StrokeRect):
                points = [self._scale(p) for p in prim.corners]
                draw.line(points + [points[0]], fill=_rgba(prim.color, prim.alpha),
                          width=self._width(prim.width))
            elif isinstance(prim, GridLine):
                self._draw_line(draw, prim)
            elif isinstance(prim, FillCircle):
                draw.ellipse(self._circle_box(prim.center, prim.radius),
                             fill=_rgba(prim.color, prim.alpha))
            elif isinstance(prim, StrokeCircle):
                draw.ellipse(self._circle_box(prim.center, prim.radius),
                             outline=_rgba(prim.color, prim.alpha), width=self._width(prim.width))
            elif isinstance(prim, RadialGlow):
                self._draw_glow(draw, prim)
            elif isinstance(prim, TextLabel):
                self._draw_text(img, prim)
            else:
                logger.debug(f"Unknown primitive {type(prim).__name__}, skipping")

        if s > 1:
            img = img.resize((self.width, self.height), Image.Resampling.LANCZOS)

        return np.array(img)

    def _circle_box(self, center: Sequence[float], radius: float) -> list:
        cx, cy = self._scale(center)
        r = radius * self._supersample
        return [cx - r, cy - r, cx + r, cy + r]

    def _draw_line(self, draw: ImageDraw.ImageDraw, prim: GridLine) -> None:
        fill = _rgba(prim.color, prim.alpha)
        width = self._width(prim.width)
        start, end = self._scale(prim.start), self._scale(prim.end)
        if prim.dash is None:
            draw.line([start, end], fill=fill, width=width)
            return
        on, off = prim.dash
        scaled_dash = (on * self._supersample, off * self._supersample)
        for a, b in dash_segments(start, end, scaled_dash):
            draw.line([a, b], fill=fill, width=width)

    def _draw_glow(self, draw: ImageDraw.ImageDraw, prim: RadialGlow) -> None:
        # Stacked translucent discs approximate a linear radial falloff
        step_alpha = prim.alpha / GLOW_STEPS
        for i in range(GLOW_STEPS):
            radius = prim.radius * (GLOW_STEPS - i) / GLOW_STEPS
            draw.ellipse(self._circle_box(prim.center, radius), fill=_rgba(prim.color, step_alpha))

    def _draw_text(self, img: Image.Image, prim: TextLabel) -> None:
        font = self._font(prim.size * self._supersample)
        probe = ImageDraw.Draw(img)
        left, top, right, bottom = probe.textbbox((0, 0), prim.text, font=font)
        text_w, text_h = right - left, bottom - top
        if text_w <= 0 or text_h <= 0:
            return

        # Draw on a transparent tile, rotate, then paste centered on the anchor
        pad = 2
        tile = Image.new('RGBA', (text_w + 2 * pad, text_h + 2 * pad), (0, 0, 0, 0))
        ImageDraw.Draw(tile).text((pad - left, pad - top), prim.text,
                                  fill=_rgba(prim.color, prim.alpha), font=font)
        if abs(prim.rotation) > 0.01:
            # PIL rotates counterclockwise; screen rotation is clockwise
            tile = tile.rotate(-prim.rotation, resample=Image.Resampling.BICUBIC, expand=True)

        cx, cy = self._scale(prim.position)
        x = int(math.floor(cx - tile.width / 2))
        y = int(math.floor(cy - tile.height / 2))
        img.paste(tile, (x, y), tile)

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from skillmap.utils.numeric import clamp

# factors for wheel ticks and the +/- buttons
WHEEL_IN, WHEEL_OUT = 1.1, 0.9
BUTTON_IN, BUTTON_OUT = 1.12, 0.88


@dataclass(frozen=True)
class Viewport:
    scale: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    def screen_to_world(self, x: float, y: float) -> Tuple[float, float]:
        return (x - self.tx) / self.scale, (y - self.ty) / self.scale

    def world_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.scale + self.tx, y * self.scale + self.ty

    def svg_transform(self) -> str:
        return f"translate({self.tx:.3f} {self.ty:.3f}) scale({self.scale:.4f})"


IDENTITY = Viewport()


@dataclass(frozen=True)
class ViewportBounds:
    """Canvas size, zoom range and the margin of content that must stay on screen.

    Translation is limited so at least ``margin`` pixels of the scaled content
    overlap the canvas on each axis:
    ``margin - size*scale <= t <= size - margin``.
    """
    width: float
    height: float
    min_zoom: float = 0.75
    max_zoom: float = 2.6
    margin: float = 90.0

    def clamp(self, vp: Viewport) -> Viewport:
        scale = clamp(vp.scale, self.min_zoom, self.max_zoom)
        tx = clamp(vp.tx, self.margin - self.width * scale, self.width - self.margin)
        ty = clamp(vp.ty, self.margin - self.height * scale, self.height - self.margin)
        return Viewport(scale, tx, ty)

    def center(self) -> Tuple[float, float]:
        return self.width / 2, self.height / 2


def zoom_at(
    vp: Viewport,
    factor: float,
    bounds: ViewportBounds,
    anchor: Optional[Tuple[float, float]] = None,
) -> Viewport:
    """Scale by ``factor`` keeping the world point under ``anchor`` fixed on screen.

    ``anchor`` defaults to the canvas center. The point stays put whenever the
    anchor lies inside the padded canvas and over content; outside that the
    pan clamp may shift it.
    """
    next_scale = clamp(vp.scale * factor, bounds.min_zoom, bounds.max_zoom)
    if abs(next_scale - vp.scale) < 0.0001:
        return vp
    ax, ay = anchor if anchor is not None else bounds.center()
    wx, wy = vp.screen_to_world(ax, ay)
    return bounds.clamp(Viewport(next_scale, ax - wx * next_scale, ay - wy * next_scale))


def pan_to(vp: Viewport, tx: float, ty: float, bounds: ViewportBounds) -> Viewport:
    return bounds.clamp(Viewport(vp.scale, tx, ty))

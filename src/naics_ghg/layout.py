# packed-circle positions for the hierarchy and the zoom that centers a node
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import circlify

from naics_ghg.hierarchy import Branch, Node


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    @property
    def short_side(self) -> float:
        return min(self.width, self.height)


@dataclass(frozen=True)
class Circle:
    x: float
    y: float
    r: float


@dataclass(frozen=True)
class ZoomTransform:
    """Maps layout coordinates to screen pixels: screen = layout * scale + translate."""
    scale: float
    translate_x: float
    translate_y: float

    def to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.scale + self.translate_x, y * self.scale + self.translate_y

    def window(self, viewport: Viewport) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """The layout-space x and y ranges visible in the viewport."""
        x0 = -self.translate_x / self.scale
        y0 = -self.translate_y / self.scale
        return (x0, x0 + viewport.width / self.scale), (y0, y0 + viewport.height / self.scale)


IDENTITY = ZoomTransform(1.0, 0.0, 0.0)

# the root fills the viewport, anything else keeps a small margin
FOCUS_FILL = 0.95


def zoom_to(circle: Circle, viewport: Viewport, has_code: bool = True) -> ZoomTransform:
    if circle.r <= 0 or viewport.short_side <= 0:
        return IDENTITY
    fill = FOCUS_FILL if has_code else 1.0
    scale = viewport.short_side * fill / (2 * circle.r)
    return ZoomTransform(
        scale=scale,
        translate_x=viewport.width / 2 - circle.x * scale,
        translate_y=viewport.height / 2 - circle.y * scale,
    )


class PackLayout:
    """Circle positions for every drawable node of one tree, keyed by node key."""

    def __init__(self, circles: Dict[str, Circle]):
        self._circles = circles

    def __len__(self) -> int:
        return len(self._circles)

    def __contains__(self, node: Node) -> bool:
        return node.key in self._circles

    def circle_for(self, node: Node) -> Optional[Circle]:
        return self._circles.get(node.key)


def _circlify_input(node: Node) -> dict:
    item = {"id": node.key, "datum": node.value}
    # circlify only packs positive areas
    children = [_circlify_input(c) for c in node.children if c.value > 0]
    if children:
        item["children"] = children
    return item


def pack_hierarchy(root: Branch) -> PackLayout:
    """
    Pack the tree into the unit circle centered on the origin.

    Circle areas are proportional to node values. Nodes with a non-positive
    value have no area and are left out of the layout.
    """
    circles = {root.key: Circle(0.0, 0.0, 1.0)}
    data = [_circlify_input(c) for c in root.children if c.value > 0]
    if not data:
        return PackLayout(circles)
    for packed in circlify.circlify(data, show_enclosure=False):
        if packed.ex is None:
            continue
        circles[packed.ex["id"]] = Circle(packed.x, packed.y, packed.r)
    return PackLayout(circles)

"""
Line compression and segmentation.

Turns a pixel-space point series into a short list of drawable units:

- ``SegmentRun``: consecutive points without a color transition, drawn as one
  path with a uniform stroke.
- ``SegmentPoint``: a standalone joint, drawn as a rotated rectangle spanning
  the gap to its predecessor, filled with a solid color or a gradient.

The first retained point is always emitted as a standalone anchor with a
distance of 0; renderers draw nothing for it but it is the predecessor of
whatever follows. Gradients are deduplicated by their canonical name.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Union

from .accessors import AccessorLike, attribute_value, resolve_accessor, to_number
from .colors import dissimilar_colors, gradient_name
from .config import SegmentConfig

logger = logging.getLogger(__name__)

# Minimum change of direction (degrees) that keeps a point on screen
ANGLE_RESOLUTION = 5
# Threshold multipliers for points outside the viewport
OFFSCREEN_RESOLUTION_FACTOR = 10
OFFSCREEN_ANGLE_FACTOR = 4

DEFAULT_COLOR = 'black'


@dataclass
class SegmentPoint:
    """A retained point with the geometry and colors of the step that reached it."""
    x: float
    y: float
    index: int
    color1: str
    color2: str
    continuous: bool = True
    x_component: float = 0.0
    y_component: float = 0.0
    distance: float = 0.0
    angle: Optional[float] = None

    @property
    def has_gradient(self) -> bool:
        return self.color1 != self.color2

    @property
    def gradient_id(self) -> Optional[str]:
        return gradient_name(self.color1, self.color2) if self.has_gradient else None


@dataclass
class SegmentRun:
    """Consecutive points drawn as a single path."""
    points: List[SegmentPoint] = field(default_factory=list)

    @property
    def color(self) -> str:
        return self.points[0].color1

    def __len__(self):
        return len(self.points)


@dataclass(frozen=True)
class GradientDescriptor:
    """A linear gradient definition shared by every joint with the same color pair."""
    id: str
    color1: str
    color2: str


Unit = Union[SegmentPoint, SegmentRun]


@dataclass
class CompressedLine:
    """Drawable units in order plus the gradients they reference."""
    units: List[Unit]
    gradients: List[GradientDescriptor]

    @property
    def points(self) -> List[SegmentPoint]:
        """Retained points in order, each listed once."""
        seen = set()
        points = []
        for unit in self.units:
            for point in (unit.points if isinstance(unit, SegmentRun) else [unit]):
                if point.index not in seen:
                    seen.add(point.index)
                    points.append(point)
        return points

    @property
    def runs(self) -> List[SegmentRun]:
        return [u for u in self.units if isinstance(u, SegmentRun)]

    @property
    def joints(self) -> List[SegmentPoint]:
        return [u for u in self.units if isinstance(u, SegmentPoint)]


def _last_point(unit: Unit) -> SegmentPoint:
    return unit.points[-1] if isinstance(unit, SegmentRun) else unit


def _angle_change(a: float, b: float) -> float:
    """Smallest difference between two directions in degrees (0..180)."""
    diff = abs(a - b) % 360
    return 360 - diff if diff > 180 else diff


def _extent(scale) -> Optional[float]:
    """Pixel span of a scale, if it has one."""
    for attr in ('pixel_span', 'span'):
        value = getattr(scale, attr, None)
        if value is not None:
            return value
    return None


def _on_screen(x: float, y: float, width: Optional[float], height: Optional[float]) -> bool:
    if width is not None and not 0 <= x <= width:
        return False
    if height is not None and not 0 <= y <= height:
        return False
    return True


def collect_gradients(units: Sequence[Unit]) -> List[GradientDescriptor]:
    """Deduplicated gradients of the standalone joints, in first-use order."""
    gradients = {}
    for unit in units:
        if isinstance(unit, SegmentPoint) and unit.has_gradient:
            name = unit.gradient_id
            if name not in gradients:
                gradients[name] = GradientDescriptor(name, unit.color1, unit.color2)
    return list(gradients.values())


def compress_line(records: Sequence[Any], x_scale, y_scale, color: Optional[AccessorLike] = None,
                  continuity: Optional[AccessorLike] = None, resolution: float = 0,
                  stroke_width: float = 5, color_resolution: float = 5,
                  width: Optional[float] = None, height: Optional[float] = None) -> CompressedLine:
    """
    Compress a point series into runs and standalone joints.

    A point is kept when it is at least ``stroke_width`` away from the last
    kept point and either its color transition needs a gradient, its
    continuity flag flipped, it is at least ``resolution`` away, or the
    direction changed by more than ``ANGLE_RESOLUTION`` degrees. Off-screen
    points use coarser thresholds.

    Args:
        records: Records in drawing order
        x_scale: Callable mapping a record to a pixel x (None for missing)
        y_scale: Callable mapping a record to a pixel y (None for missing)
        color: Optional accessor (field name or callable, e.g. a ColorScale) giving a color string
        continuity: Optional accessor; falsy values mark a break in the line
        resolution: Minimum pixel spacing kept for distance alone (default: 0)
        stroke_width: Line width in pixels (default: 5)
        color_resolution: Color-difference threshold (default: 5)
        width: Viewport width; defaults to the x scale's pixel span when known
        height: Viewport height; defaults to the y scale's pixel span when known

    Returns:
        CompressedLine

    Examples:
        xs = build_scale(attr_scale(rows, "t"), 600)
        ys = build_scale(attr_scale(rows, "value"), 200, invert=True)
        line = compress_line(rows, xs, ys, color="color", stroke_width=2)
    """
    config = SegmentConfig(resolution=resolution, stroke_width=stroke_width,
                           color_resolution=color_resolution, continuity=continuity)
    color = resolve_accessor(color) if color is not None else None
    continuity = resolve_accessor(continuity) if continuity is not None else None
    if width is None:
        width = _extent(x_scale)
    if height is None:
        height = _extent(y_scale)

    compressed: List[Unit] = []

    for index, record in enumerate(records):
        x = to_number(x_scale(record))
        y = to_number(y_scale(record))
        if x is None or y is None:
            continue

        point_color = (attribute_value(record, color) if color is not None else None) or DEFAULT_COLOR

        if not compressed:
            compressed.append(SegmentPoint(x=x, y=y, index=index, color1=point_color,
                                           color2=point_color, continuous=False))
            continue

        last_unit = compressed[-1]
        last = _last_point(last_unit)

        x_component = x - last.x
        y_component = y - last.y
        distance = math.hypot(x_component, y_component)
        angle = math.degrees(math.atan2(y_component, x_component))
        continuous = bool(attribute_value(record, continuity)) if continuity is not None else True

        point = SegmentPoint(x=x, y=y, index=index, color1=last.color2, color2=point_color,
                             continuous=continuous, x_component=x_component,
                             y_component=y_component, distance=distance, angle=angle)

        if _on_screen(x, y, width, height):
            point_resolution = config.resolution
            angle_resolution = ANGLE_RESOLUTION
        else:
            point_resolution = config.resolution * OFFSCREEN_RESOLUTION_FACTOR
            angle_resolution = ANGLE_RESOLUTION * OFFSCREEN_ANGLE_FACTOR

        transition = dissimilar_colors(point.color1, point.color2, distance,
                                       config.color_resolution)
        keep = distance >= config.stroke_width and (
            transition
            or continuous != last.continuous
            or distance >= point_resolution
            or (last.angle is not None and _angle_change(last.angle, angle) > angle_resolution)
        )
        if not keep:
            continue

        previous_transition = dissimilar_colors(last.color1, last.color2, last.distance,
                                                config.color_resolution)
        if transition or previous_transition:
            compressed.append(point)
        elif isinstance(last_unit, SegmentRun):
            last_unit.points.append(point)
        else:
            compressed.append(SegmentRun([last, point]))

    gradients = collect_gradients(compressed)
    logger.debug("compress_line: %d records -> %d units, %d gradients",
                 len(records), len(compressed), len(gradients))
    return CompressedLine(units=compressed, gradients=gradients)

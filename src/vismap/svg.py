"""
SVG rendering of engine output.

Everything here returns markup strings; composition into documents happens
in ``charts.Chart``.
"""

import math
from html import escape
from typing import Any, Callable, List, Optional, Sequence

from .binning import BinStats1d, BinStats2d
from .segments import CompressedLine, SegmentPoint, SegmentRun

SHARP_ANGLE = 30


def _num(value: float) -> str:
    """Compact number formatting for attributes."""
    return f"{value:.3f}".rstrip('0').rstrip('.') if value != int(value) else str(int(value))


def _attr(value) -> str:
    return escape(str(value), quote=True)


def render_gradients(line: CompressedLine) -> str:
    """``<defs>`` block with one linear gradient per descriptor (empty if none)."""
    if not line.gradients:
        return ""
    stops = []
    for g in line.gradients:
        stops.append(
            f'<linearGradient id="{_attr(g.id)}">'
            f'<stop offset="0%" stop-color="{_attr(g.color1)}"/>'
            f'<stop offset="100%" stop-color="{_attr(g.color2)}"/>'
            f'</linearGradient>'
        )
    return f"<defs>{''.join(stops)}</defs>"


def render_run(run: SegmentRun, stroke_width: float) -> str:
    d = " L ".join(f"{_num(p.x)},{_num(p.y)}" for p in run.points)
    return (f'<path d="M {d}" fill="none" stroke="{_attr(run.color)}" '
            f'stroke-width="{_num(stroke_width)}" stroke-linejoin="round"/>')


def render_joint(point: SegmentPoint, previous: SegmentPoint,
                 following: Optional[SegmentPoint], stroke_width: float) -> str:
    """
    Rotated rounded rectangle spanning from ``previous`` to ``point``.

    Smooth continuous joints get a small corner radius; sharp turns and breaks
    get fully rounded ends.
    """
    center_x = (previous.x + point.x) / 2
    center_y = (previous.y + point.y) / 2
    angle = point.angle or 0.0
    sharp = abs(angle - (previous.angle or 0.0)) > SHARP_ANGLE
    pad = (4 if sharp else 2) if stroke_width >= 2 else 0
    next_continuous = following.continuous if following is not None else True
    if not sharp and previous.continuous and next_continuous:
        radius = pad
    else:
        radius = stroke_width / 2

    fill = f"url(#{point.gradient_id})" if point.has_gradient else point.color1
    return (
        f'<rect x="{_num(center_x - point.distance / 2 - pad / 2)}" '
        f'y="{_num(center_y - stroke_width / 2)}" '
        f'width="{_num(point.distance + pad)}" height="{_num(stroke_width)}" '
        f'rx="{_num(radius)}" ry="{_num(radius)}" fill="{_attr(fill)}" '
        f'transform="rotate({_num(angle)} {_num(center_x)} {_num(center_y)})"/>'
    )


def render_segments(line: CompressedLine, stroke_width: float = 5) -> str:
    """Render a compressed line as an SVG group (gradient defs, paths and joints)."""
    parts: List[str] = [render_gradients(line)]
    units = line.units
    for i, unit in enumerate(units):
        if isinstance(unit, SegmentRun):
            parts.append(render_run(unit, stroke_width))
            continue
        if i == 0:
            # anchor point, nothing to span
            continue
        previous = units[i - 1]
        previous = previous.points[-1] if isinstance(previous, SegmentRun) else previous
        following = units[i + 1] if i + 1 < len(units) else None
        if isinstance(following, SegmentRun):
            following = following.points[0]
        parts.append(render_joint(unit, previous, following, stroke_width))
    return f"<g>{''.join(parts)}</g>"


def render_bars(result: BinStats1d, fill: str = 'black') -> str:
    """Histogram bars, one per 1D bin."""
    bars = []
    for b in result.bins:
        x = result.x_scale(b)
        y = result.y_scale(b)
        if x is None or y is None:
            continue
        bars.append(
            f'<rect x="{_num(x)}" y="{_num(y)}" width="{_num(result.bin_width)}" '
            f'height="{_num(result.height - y)}" fill="{_attr(fill)}" stroke="none"/>'
        )
    return f"<g>{''.join(bars)}</g>"


def render_cells(result: BinStats2d) -> str:
    """Heat-map cells, one per 2D bin, colored by the summary statistic."""
    cells = []
    for b in result.bins.values():
        x = result.x_scale(b)
        y = result.y_scale(b)
        if x is None or y is None:
            continue
        cells.append(
            f'<rect x="{math.floor(x - 0.5)}" y="{math.floor(y - result.bin_height - 0.5)}" '
            f'width="{math.ceil(result.bin_width + 1)}" height="{math.ceil(result.bin_height + 1)}" '
            f'fill="{_attr(result.color_scale(b))}" stroke="none"/>'
        )
    return f"<g>{''.join(cells)}</g>"


def point_opacity(count: int) -> float:
    """Marker opacity for a scatter of ``count`` points; denser plots fade."""
    if count < 1000:
        return 1
    if count < 5000:
        return 0.75
    if count < 50000:
        return 0.5
    return 0.25


def point_radius(count: int) -> float:
    if count < 5000:
        return 2
    if count < 10000:
        return 1.5
    return 1


def render_points(records: Sequence[Any], x_scale, y_scale,
                  color_scale: Optional[Callable[[Any], str]] = None) -> str:
    """Scatter markers, one circle per record with a finite position."""
    opacity = point_opacity(len(records))
    radius = point_radius(len(records))
    circles = []
    for record in records:
        x = x_scale(record)
        y = y_scale(record)
        if x is None or y is None:
            continue
        fill = color_scale(record) if color_scale is not None else 'black'
        circles.append(
            f'<circle cx="{_num(x)}" cy="{_num(y)}" r="{_num(radius)}" '
            f'opacity="{_num(opacity)}" fill="{_attr(fill)}" stroke="none"/>'
        )
    return f"<g>{''.join(circles)}</g>"


def svg_document(body: str, width: float, height: float, title: Optional[str] = None) -> str:
    """Wrap SVG markup into a standalone document."""
    title_markup = f"<title>{escape(title)}</title>" if title else ""
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(width)}" height="{_num(height)}" '
        f'viewBox="0 0 {_num(width)} {_num(height)}">{title_markup}{body}</svg>'
    )

"""
Chart functions - matplotlib-style entry points returning composable SVG charts.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from .accessors import AccessorLike
from .binning import bin_stats_1d, bin_stats_2d
from .colors import DEFAULT_COLOR_SCHEME, build_color_scale
from .config import ChartConfig, SegmentConfig
from .scales import attr_scale, build_scale
from .segments import compress_line
from .svg import render_bars, render_cells, render_points, render_segments, svg_document

# Optional imports for Jupyter notebook support
try:
    import ipywidgets as widgets
    from IPython.display import display
    JUPYTER_AVAILABLE = True
except ImportError:
    widgets = None
    display = None
    JUPYTER_AVAILABLE = False

logger = logging.getLogger(__name__)


def display_svg(svg_string: str, width: float = 600, height: float = 400):
    """
    Display an SVG string using ipywidgets HTML (if available).

    Args:
        svg_string: SVG content as string
        width: Container width
        height: Container height

    Returns:
        ipywidgets.HTML widget if Jupyter is available, otherwise None
    """
    if not JUPYTER_AVAILABLE:
        logger.warning("Jupyter not available. SVG generated (%d chars) but cannot display.",
                       len(svg_string))
        return None

    html_content = f"""
    <div style="width: {width}px; height: {height}px; margin: 10px 0;
                border: 1px solid #ddd; border-radius: 8px;
                background: white; overflow: hidden;">
        {svg_string}
    </div>
    """
    widget = widgets.HTML(value=html_content)
    display(widget)
    return widget


class Chart:
    """
    Chart wrapper class that supports composition operations.
    Enables matplotlib-style chart composition with * + / operators.
    """

    def __init__(self, body: str = "", chart_type: Optional[str] = None, width: float = 320,
                 height: float = 240, title: Optional[str] = None, data: Any = None):
        """
        Initialize a Chart from rendered SVG markup.

        Args:
            body: SVG markup without the enclosing <svg> element
            chart_type: Type of chart ('line', 'scatter', 'hist', 'heatmap', 'composite')
            width: Chart width in pixels
            height: Chart height in pixels
            title: Chart title (optional)
            data: Engine output the chart was rendered from
        """
        self.body = body
        self.chart_type = chart_type
        self.width = width
        self.height = height
        self.title = title
        self.data = data

        # Lazy SVG generation
        self._svg = None

    @property
    def svg(self) -> str:
        """Get SVG string, generating it if needed."""
        if self._svg is None:
            self._svg = svg_document(self.body, self.width, self.height, self.title)
        return self._svg

    def show(self, display_width: Optional[float] = None, display_height: Optional[float] = None):
        """Display the chart in Jupyter notebook."""
        return display_svg(self.svg, display_width or self.width, display_height or self.height)

    def _repr_html_(self):
        """Enable direct display in Jupyter notebooks via display()."""
        return self.svg

    def __repr__(self):
        return f"<Chart {self.chart_type or 'empty'} {self.width}x{self.height}>"

    def __mul__(self, other: 'Chart') -> 'Chart':
        """
        Overlay charts - * operator

        Example:
            chart1 * chart2  # Draw chart2 on top of chart1
        """
        return Chart(
            body=self.body + other.body,
            chart_type='composite',
            width=max(self.width, other.width),
            height=max(self.height, other.height),
            title=self.title or other.title,
        )

    def __add__(self, other: 'Chart') -> 'Chart':
        """
        Place charts side-by-side - + operator

        Example:
            chart1 + chart2  # Place chart2 to the right of chart1
        """
        return self._compose_charts(other, 'sideBySide')

    def __truediv__(self, other: 'Chart') -> 'Chart':
        """
        Place charts vertically - / operator

        Example:
            chart1 / chart2  # Place chart2 below chart1
        """
        return self._compose_charts(other, 'vertical')

    def _compose_charts(self, other: 'Chart', operation: str) -> 'Chart':
        if operation == 'sideBySide':
            dx, dy = self.width, 0
            width = self.width + other.width
            height = max(self.height, other.height)
        elif operation == 'vertical':
            dx, dy = 0, self.height
            width = max(self.width, other.width)
            height = self.height + other.height
        else:
            raise ValueError(f"Unknown composition operation: {operation}")

        body = (f'<g>{self.svg}</g>'
                f'<g transform="translate({dx},{dy})">{other.svg}</g>')
        return Chart(body=body, chart_type='composite', width=width, height=height)

    def save_svg(self, filepath: str):
        """
        Save chart as SVG file.

        Args:
            filepath: Path to save the SVG file (relative or absolute)

        Example:
            chart.save_svg("figure.svg")
            chart.save_svg("results/chart.svg")
        """
        full_path = Path(filepath).expanduser().resolve()
        full_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(full_path, 'w', encoding='utf-8') as f:
                f.write(self.svg)
        except OSError as e:
            raise RuntimeError(f"Failed to save SVG to {full_path}: {e}")

    def save(self, filepath: str):
        """
        Save chart with format auto-detected from file extension.

        Supported formats:
            .svg - Scalable Vector Graphics
        """
        extension = Path(filepath).suffix.lower()
        if extension == '.svg':
            self.save_svg(filepath)
        else:
            supported_formats = ['.svg']
            raise ValueError(f"Unsupported file format '{extension}'. "
                             f"Supported formats: {', '.join(supported_formats)}")


def line(records: Sequence[Any], x: AccessorLike, y: AccessorLike,
         color: Optional[AccessorLike] = None, color_scale: Optional[Callable[[Any], str]] = None,
         color_scheme: str = DEFAULT_COLOR_SCHEME, continuity: Optional[AccessorLike] = None,
         resolution: float = 0, stroke_width: float = 5, color_resolution: float = 5,
         override=None, title=None, width=320, height=240, show=False) -> Chart:
    """
    Create a line chart, compressed into runs and gradient joints.

    Args:
        records: Records in drawing order
        x: Accessor for the horizontal position
        y: Accessor for the vertical position
        color: Numeric accessor mapped through ``color_scheme`` (optional)
        color_scale: Callable returning a color string per record (overrides ``color``)
        color_scheme: Color scheme name (default: 'turbo')
        continuity: Boolean accessor; falsy values break the line
        resolution: Minimum pixel spacing between kept points (default: 0)
        stroke_width: Line width in pixels (default: 5)
        color_resolution: Color-difference threshold for gradients (default: 5)
        override: Partial statistics per axis, e.g. {"y": {"min": 0, "max": 100}}
        title: Chart title (optional)
        width: Chart width in pixels (default: 320)
        height: Chart height in pixels (default: 240)
        show: Whether to display the chart immediately

    Returns:
        Chart object with composition operators (+, *, /)

    Examples:
        vismap.line(rows, "t", "speed")
        vismap.line(rows, "t", "speed", color="heart_rate", color_scheme="plasma")
        vismap.line(rows, "t", "speed", continuity="moving", resolution=2)
    """
    config = ChartConfig(title=title, width=width, height=height)
    segment_config = SegmentConfig(resolution=resolution, stroke_width=stroke_width,
                                   color_resolution=color_resolution, continuity=continuity,
                                   override=override)
    overrides = segment_config.override or {}

    x_scale = build_scale(attr_scale(records, x, overrides.get('x')), config.width)
    y_scale = build_scale(attr_scale(records, y, overrides.get('y')), config.height, invert=True)
    if color_scale is None and color is not None:
        color_scale = build_color_scale(records, color, color_scheme, override=overrides.get('color'))

    compressed = compress_line(
        records, x_scale, y_scale,
        color=color_scale,
        continuity=segment_config.continuity,
        resolution=segment_config.resolution,
        stroke_width=segment_config.stroke_width,
        color_resolution=segment_config.color_resolution,
    )

    chart = Chart(
        body=render_segments(compressed, segment_config.stroke_width),
        chart_type='line',
        width=config.width,
        height=config.height,
        title=config.title,
        data=compressed,
    )

    if show:
        chart.show()

    return chart


def scatter(records: Sequence[Any], x: AccessorLike, y: AccessorLike,
            color: Optional[AccessorLike] = None, color_scheme: str = DEFAULT_COLOR_SCHEME,
            override=None, title=None, width=320, height=240, show=False) -> Chart:
    """
    Create a scatter plot of two numeric attributes.

    Marker radius and opacity shrink as the number of records grows.

    Args:
        records: Records to plot
        x: Accessor for the horizontal position
        y: Accessor for the vertical position
        color: Numeric accessor mapped through ``color_scheme`` (optional)
        color_scheme: Color scheme name (default: 'turbo')
        override: Partial statistics per axis, e.g. {"x": {"min": 0}}
        title: Chart title (optional)
        width: Chart width in pixels (default: 320)
        height: Chart height in pixels (default: 240)
        show: Whether to display the chart immediately

    Returns:
        Chart object with composition operators (+, *, /)

    Examples:
        vismap.scatter(rows, "weight", "height")
        vismap.scatter(rows, "lon", "lat", color="elevation", color_scheme="viridis")
    """
    config = ChartConfig(title=title, width=width, height=height)
    overrides = override or {}

    x_scale = build_scale(attr_scale(records, x, overrides.get('x')), config.width)
    y_scale = build_scale(attr_scale(records, y, overrides.get('y')), config.height, invert=True)
    color_scale = None
    if color is not None:
        color_scale = build_color_scale(records, color, color_scheme, override=overrides.get('color'))

    chart = Chart(
        body=render_points(records, x_scale, y_scale, color_scale),
        chart_type='scatter',
        width=config.width,
        height=config.height,
        title=config.title,
        data=records,
    )

    if show:
        chart.show()

    return chart


def hist(records: Sequence[Any], x: AccessorLike, summary_dimension: Optional[AccessorLike] = None,
         summary_stat: AccessorLike = 'count', fill='black', title=None, width=320, height=240,
         show=False) -> Chart:
    """
    Create a histogram with data-driven bin widths.

    Args:
        records: Records to bin
        x: Accessor of the binned dimension
        summary_dimension: Accessor summarized per bin (default: ``x``)
        summary_stat: Statistic giving bar height (default: 'count')
        fill: Bar color
        title: Chart title (optional)
        width: Chart width in pixels (default: 320), rounded down to whole bins
        height: Chart height in pixels (default: 240)
        show: Whether to display the chart immediately

    Returns:
        Chart object with composition operators (+, *, /)

    Examples:
        vismap.hist(rows, "duration")
        vismap.hist(rows, "hour", summary_dimension="sales", summary_stat="mean")
    """
    config = ChartConfig(title=title, width=width, height=height)
    result = bin_stats_1d(records, x, summary_dimension if summary_dimension is not None else x,
                          summary_stat, config.width, config.height)

    chart = Chart(
        body=render_bars(result, fill),
        chart_type='hist',
        width=result.actual_width,
        height=config.height,
        title=config.title,
        data=result,
    )

    if show:
        chart.show()

    return chart


def heatmap(records: Sequence[Any], x: AccessorLike, y: AccessorLike, color: AccessorLike,
            stat: AccessorLike = 'count', color_scheme='plasma', title=None, width=320,
            height=240, show=False) -> Chart:
    """
    Create a heat map over a dense grid of 2D bins.

    Args:
        records: Records to bin
        x: Accessor of the horizontal dimension
        y: Accessor of the vertical dimension
        color: Accessor summarized per cell
        stat: Statistic of each cell driving its color (default: 'count')
        color_scheme: Color scheme name (default: 'plasma')
        title: Chart title (optional)
        width: Chart width in pixels (default: 320), rounded to whole cells
        height: Chart height in pixels (default: 240), rounded to whole cells
        show: Whether to display the chart immediately

    Returns:
        Chart object with composition operators (+, *, /)

    Examples:
        vismap.heatmap(rows, "lon", "lat", "elevation", stat="mean")
    """
    config = ChartConfig(title=title, width=width, height=height)
    result = bin_stats_2d(records, x, y, color, stat, config.width, config.height, color_scheme)

    chart = Chart(
        body=render_cells(result),
        chart_type='heatmap',
        width=result.actual_width,
        height=result.actual_height,
        title=config.title,
        data=result,
    )

    if show:
        chart.show()

    return chart

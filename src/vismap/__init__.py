"""
vismap - data-to-visual mapping for declarative charts

Turns sequences of records into plotting-space geometry: statistics,
normalizing and pixel scales, adaptive 1D/2D binning, and compression of
point series into a minimal set of SVG primitives with shared gradients.

Features:
- Statistics: count, range, mean, variance, stdev, median over any accessor
- Scales: raw value -> [0, 1] -> pixels, with pinned ranges and inverted axes
- Binning: Freedman-Diaconis bin widths, dense heat-map grids
- Line compression: merged uniform runs, gradient joints, off-screen thinning
- Charts: line, scatter, hist and heatmap as composable SVG with +, *, / operators

Usage:
    import vismap

    # Scales
    xs = vismap.build_scale(vismap.attr_scale(rows, "t"), 600)
    ys = vismap.build_scale(vismap.attr_scale(rows, "value"), 200, invert=True)

    # Compress a colored series
    line = vismap.compress_line(rows, xs, ys, color="color", stroke_width=2)

    # Charts
    chart = vismap.line(rows, "t", "value", color="speed")
    chart.save("speed.svg")
    both = chart + vismap.hist(rows, "value")   # Side-by-side
"""

import os

from .accessors import FieldAccessor, FunctionAccessor, attribute_number, attribute_value, resolve_accessor
from .binning import Bin1d, Bin2d, BinStats1d, BinStats2d, bin_stats_1d, bin_stats_2d
from .charts import Chart, heatmap, hist, line, scatter
from .colors import COLOR_SCHEMES, ColorScale, build_color_scale, dissimilar_colors, gradient_name
from .config import ChartConfig, SegmentConfig, setup_logger
from .data import Group, grouped, split_data, subset
from .regression import LinearRegression, linear_regression
from .scales import PixelScale, Scale, attr_scale, build_scale
from .segments import CompressedLine, GradientDescriptor, SegmentPoint, SegmentRun, compress_line
from .smoothing import KERNEL_CACHE, KernelCache, smooth
from .stats import Stats, attr_stats, pad_range, sigma_filter
from .svg import render_segments

__version__ = "0.1.0"

if 'VISMAP_DEBUG' in os.environ:
    setup_logger(__name__, 'DEBUG')

__all__ = [
    'FieldAccessor', 'FunctionAccessor', 'attribute_number', 'attribute_value', 'resolve_accessor',
    'Bin1d', 'Bin2d', 'BinStats1d', 'BinStats2d', 'bin_stats_1d', 'bin_stats_2d',
    'Chart', 'heatmap', 'hist', 'line', 'scatter',
    'COLOR_SCHEMES', 'ColorScale', 'build_color_scale', 'dissimilar_colors', 'gradient_name',
    'ChartConfig', 'SegmentConfig', 'setup_logger',
    'Group', 'grouped', 'split_data', 'subset',
    'LinearRegression', 'linear_regression',
    'PixelScale', 'Scale', 'attr_scale', 'build_scale',
    'CompressedLine', 'GradientDescriptor', 'SegmentPoint', 'SegmentRun', 'compress_line',
    'KERNEL_CACHE', 'KernelCache', 'smooth',
    'Stats', 'attr_stats', 'pad_range', 'sigma_filter',
    'render_segments',
]

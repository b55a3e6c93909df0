"""
Binning engine - equal-width 1D and 2D bins with per-bin statistics.

Bin widths follow the Freedman-Diaconis style rule ``3.5 * stdev / n^(1/3)``
and fall back to ``range / 20`` when the standard deviation is undefined.
Every record with a finite position lands in exactly one bin: normalized
positions are clamped so the maximum value goes into the last bin.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .accessors import Accessor, AccessorLike, resolve_accessor
from .colors import ColorScale, build_color_scale
from .scales import Scale, attr_scale
from .stats import Stats, StatsView, attr_stats

logger = logging.getLogger(__name__)

HEATMAP_NULL_COLOR = 'rgba(200,200,200,0.25)'


@dataclass(frozen=True)
class Bin1d(StatsView):
    """A 1D bin: its index, member records and statistics over the summary dimension."""
    bin_index: int
    members: Tuple[Any, ...] = ()
    stats: Stats = field(default_factory=Stats)

    @property
    def member_count(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class Bin2d(StatsView):
    """A 2D grid cell: its x/y indices, member records and statistics over the summary dimension."""
    x_bin_index: int
    y_bin_index: int
    members: Tuple[Any, ...] = ()
    stats: Stats = field(default_factory=Stats)

    @property
    def key(self) -> str:
        return f"{self.x_bin_index},{self.y_bin_index}"

    @property
    def member_count(self) -> int:
        return len(self.members)


def bin_width(stats: Stats, n: int) -> float:
    """Freedman-Diaconis style bin width, or range / 20 without a standard deviation."""
    if stats.stdev is not None and n > 0:
        return 3.5 * stats.stdev / n ** (1 / 3)
    return stats.range / 20


def bin_count(value_range: float, width: float) -> int:
    """Number of bins of ``width`` covering ``value_range``; never less than 1."""
    if not (value_range > 0 and width > 0) or not math.isfinite(value_range / width):
        return 1
    return max(1, math.floor(value_range / width))


def bin_indices(normalized: np.ndarray, bins: int) -> np.ndarray:
    """Bin index per normalized position, clamped into range; -1 where the position is NaN."""
    with np.errstate(invalid='ignore'):
        indices = np.clip(np.floor(normalized * bins), 0, bins - 1)
    return np.where(np.isfinite(normalized), indices, -1).astype(int)


def pixel_size(span: float, bins: int) -> int:
    """Whole-pixel size of one of ``bins`` cells over ``span``; never less than 1."""
    return max(1, math.floor(span / bins + 0.5))


def _normalized(scale: Scale, records: Sequence[Any]) -> np.ndarray:
    return np.array([np.nan if v is None else v for v in map(scale, records)], dtype=float)


class BinScale:
    """
    Pixel scale over binned data.

    Bins map to the pixel edge of their cell; raw records map through the
    normalizing scale over ``span``. Missing values come out as None.
    """

    def __init__(self, stat_scale: Scale, index_attr: str, cell_size: float,
                 span: float, invert: bool = False):
        self.stat_scale = stat_scale
        self.accessor = stat_scale.accessor
        self.index_attr = index_attr
        self.cell_size = cell_size
        self.span = span
        self.invert = invert

    def __call__(self, record: Any) -> Optional[float]:
        index = getattr(record, self.index_attr, None) if isinstance(record, (Bin1d, Bin2d)) else None
        if index is not None:
            position = index * self.cell_size
        else:
            scaled = self.stat_scale(record)
            if scaled is None:
                return None
            position = scaled * self.span
        return self.span - position if self.invert else position


class SummaryScale:
    """Pixel scale over a statistic of each bin (e.g. bar heights)."""

    def __init__(self, stat_scale: Scale, span: float, invert: bool = True):
        self.stat_scale = stat_scale
        self.accessor = stat_scale.accessor
        self.span = span
        self.invert = invert

    def __call__(self, record: Any) -> Optional[float]:
        scaled = self.stat_scale(record)
        if scaled is None:
            return None
        return self.span - scaled * self.span if self.invert else scaled * self.span


@dataclass
class BinStats1d:
    """Result of 1D binning, with the scales needed to place the bins."""
    bins: List[Bin1d]
    x: Accessor
    summary_dimension: Accessor
    summary_stat: Accessor
    x_stat_scale: Scale
    x_bin_width: float
    x_bins: int
    bin_width: float
    actual_width: float
    height: float
    x_scale: BinScale
    y_stat_scale: Scale
    y_scale: SummaryScale

    @property
    def records(self) -> List[Bin1d]:
        return self.bins


@dataclass
class BinStats2d:
    """Result of 2D binning: a dense grid keyed ``"x,y"`` plus placement and color scales."""
    bins: Dict[str, Bin2d]
    x: Accessor
    y: Accessor
    summary_dimension: Accessor
    summary_stat: Accessor
    x_stat_scale: Scale
    y_stat_scale: Scale
    x_bin_width: float
    y_bin_width: float
    x_bins: int
    y_bins: int
    bin_width: float
    bin_height: float
    actual_width: float
    actual_height: float
    x_scale: BinScale
    y_scale: BinScale
    color_scale: ColorScale

    @property
    def records(self) -> List[Bin2d]:
        return list(self.bins.values())


def bin_stats_1d(records: Sequence[Any], x: AccessorLike, summary_dimension: AccessorLike,
                 summary_stat: AccessorLike = 'count', width: float = 320,
                 height: float = 240) -> BinStats1d:
    """
    Partition records into equal-width bins along one axis.

    Args:
        records: Records to bin
        x: Accessor of the binned dimension
        summary_dimension: Accessor summarized within each bin
        summary_stat: Statistic of each bin driving the y axis (default: 'count')
        width: Plot width in pixels
        height: Plot height in pixels

    Returns:
        BinStats1d whose ``bins`` are ordered by index
    """
    x = resolve_accessor(x)
    summary_dimension = resolve_accessor(summary_dimension)
    summary_stat = resolve_accessor(summary_stat)

    x_stat_scale = attr_scale(records, x)
    x_bin_width = bin_width(x_stat_scale.stats, len(records))
    x_bins = bin_count(x_stat_scale.range, x_bin_width)

    members: List[List[Any]] = [[] for _ in range(x_bins)]
    for record, index in zip(records, bin_indices(_normalized(x_stat_scale, records), x_bins)):
        if index >= 0:
            members[index].append(record)

    bins = [
        Bin1d(bin_index=i, members=tuple(data), stats=attr_stats(data, summary_dimension))
        for i, data in enumerate(members)
    ]
    logger.debug("bin_stats_1d on %s: %d records into %d bins of width %s",
                 x, len(records), x_bins, x_bin_width)

    pixel_bin_width = pixel_size(width, x_bins)
    actual_width = pixel_bin_width * x_bins
    y_stat_scale = attr_scale(bins, summary_stat)

    return BinStats1d(
        bins=bins,
        x=x,
        summary_dimension=summary_dimension,
        summary_stat=summary_stat,
        x_stat_scale=x_stat_scale,
        x_bin_width=x_bin_width,
        x_bins=x_bins,
        bin_width=pixel_bin_width,
        actual_width=actual_width,
        height=height,
        x_scale=BinScale(x_stat_scale, 'bin_index', pixel_bin_width, actual_width),
        y_stat_scale=y_stat_scale,
        y_scale=SummaryScale(y_stat_scale, height),
    )


def bin_stats_2d(records: Sequence[Any], x: AccessorLike, y: AccessorLike,
                 summary_dimension: AccessorLike, summary_stat: AccessorLike = 'count',
                 width: float = 320, height: float = 240,
                 color_scheme: str = 'plasma') -> BinStats2d:
    """
    Partition records into a dense grid of equal-size cells.

    X bins are kept between range/100 and range/20 wide, Y bins are only
    bounded below by range/100, which gives wide plots denser columns.
    Every cell of the grid is present in the result, empty or not.

    Args:
        records: Records to bin
        x: Accessor of the horizontal dimension
        y: Accessor of the vertical dimension
        summary_dimension: Accessor summarized within each cell
        summary_stat: Statistic of each cell driving its color (default: 'count')
        width: Plot width in pixels
        height: Plot height in pixels
        color_scheme: Color scheme for the cells (default: 'plasma')

    Returns:
        BinStats2d keyed by ``"x_bin,y_bin"``
    """
    x = resolve_accessor(x)
    y = resolve_accessor(y)
    summary_dimension = resolve_accessor(summary_dimension)
    summary_stat = resolve_accessor(summary_stat)

    n = len(records)
    x_stat_scale = attr_scale(records, x)
    y_stat_scale = attr_scale(records, y)

    x_range = x_stat_scale.range
    y_range = y_stat_scale.range
    x_bin_width = min(x_range / 20, max(bin_width(x_stat_scale.stats, n), x_range / 100))
    y_bin_width = max(bin_width(y_stat_scale.stats, n), y_range / 100)

    x_bins = bin_count(x_range, x_bin_width)
    y_bins = bin_count(y_range, y_bin_width)

    cells: Dict[Tuple[int, int], List[Any]] = {
        (xb, yb): [] for xb in range(x_bins) for yb in range(y_bins)
    }
    x_indices = bin_indices(_normalized(x_stat_scale, records), x_bins)
    y_indices = bin_indices(_normalized(y_stat_scale, records), y_bins)
    for record, xb, yb in zip(records, x_indices, y_indices):
        if xb >= 0 and yb >= 0:
            cells[(int(xb), int(yb))].append(record)

    bins: Dict[str, Bin2d] = {}
    for (xb, yb), data in cells.items():
        bins[f"{xb},{yb}"] = Bin2d(x_bin_index=xb, y_bin_index=yb, members=tuple(data),
                                   stats=attr_stats(data, summary_dimension))
    logger.debug("bin_stats_2d on %s x %s: %d records into %dx%d cells",
                 x, y, n, x_bins, y_bins)

    pixel_bin_width = pixel_size(width, x_bins)
    pixel_bin_height = pixel_size(height, y_bins)
    actual_width = pixel_bin_width * x_bins
    actual_height = pixel_bin_height * y_bins

    return BinStats2d(
        bins=bins,
        x=x,
        y=y,
        summary_dimension=summary_dimension,
        summary_stat=summary_stat,
        x_stat_scale=x_stat_scale,
        y_stat_scale=y_stat_scale,
        x_bin_width=x_bin_width,
        y_bin_width=y_bin_width,
        x_bins=x_bins,
        y_bins=y_bins,
        bin_width=pixel_bin_width,
        bin_height=pixel_bin_height,
        actual_width=actual_width,
        actual_height=actual_height,
        x_scale=BinScale(x_stat_scale, 'x_bin_index', pixel_bin_width, actual_width),
        y_scale=BinScale(y_stat_scale, 'y_bin_index', pixel_bin_height, actual_height, invert=True),
        color_scale=build_color_scale(list(bins.values()), summary_stat, color_scheme,
                                      null_color=HEATMAP_NULL_COLOR),
    )

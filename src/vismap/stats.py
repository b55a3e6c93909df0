"""
Statistics engine - descriptive statistics over a derived numeric sequence.
"""

import logging
import math
from dataclasses import dataclass, fields, replace
from typing import Any, List, Optional, Sequence

import numpy as np

from .accessors import AccessorLike, attribute_number, resolve_accessor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stats:
    """Descriptive statistics of the finite values an accessor yields."""
    count: int = 0
    na_count: int = 0
    min: float = 0.0
    max: float = 0.0
    range: float = 0.0
    sum: float = 0.0
    mean: Optional[float] = None
    variance: Optional[float] = None
    stdev: Optional[float] = None
    median: Optional[float] = None


STAT_FIELDS = tuple(f.name for f in fields(Stats))


class StatsView:
    """
    Mixin exposing the fields of a ``stats`` attribute as plain attributes.

    Lets field accessors such as ``"count"`` or ``"mean"`` work on objects that
    carry statistics (scales, bins) exactly as they would on a Stats object.
    """

    def __getattr__(self, name):
        stats = self.__dict__.get('stats')
        if stats is None or name not in STAT_FIELDS:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return getattr(stats, name)


def finite_values(records: Sequence[Any], accessor: AccessorLike) -> np.ndarray:
    """Float array of an accessor's values, NaN where a record has no finite number."""
    accessor = resolve_accessor(accessor)
    values = (attribute_number(record, accessor) for record in records)
    return np.array([np.nan if v is None else v for v in values], dtype=float)


def attr_stats(records: Sequence[Any], accessor: AccessorLike) -> Stats:
    """
    Compute statistics over the finite numbers an accessor yields.

    Records whose value is missing or non-finite are counted in ``na_count``
    and otherwise ignored. Nothing is raised for empty input: min, max, range
    and sum degenerate to 0, the rest to None.

    Args:
        records: Sequence of records
        accessor: Field name or function producing a number

    Returns:
        Stats with sample (n - 1) variance and standard median
    """
    values = finite_values(records, accessor)
    values = np.sort(values[np.isfinite(values)])
    count = len(values)

    if count == 0:
        return Stats(na_count=len(records))

    variance = float(np.var(values, ddof=1)) if count > 1 else None
    return Stats(
        count=count,
        na_count=len(records) - count,
        min=float(values[0]),
        max=float(values[-1]),
        range=float(values[-1] - values[0]),
        sum=float(np.sum(values)),
        mean=float(np.mean(values)),
        variance=variance,
        stdev=math.sqrt(variance) if variance is not None else None,
        median=float(np.median(values)),
    )


def override_stats(stats: Stats, override=None) -> Stats:
    """
    Apply a shallow override of statistic fields.

    Pinning ``min`` or ``max`` without an explicit ``range`` recomputes the
    range so that it stays ``max - min``.
    """
    if not override:
        return stats

    unknown = set(override) - set(STAT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown statistic fields in override: {', '.join(sorted(unknown))}")

    updated = replace(stats, **override)
    if 'range' not in override and ('min' in override or 'max' in override):
        updated = replace(updated, range=updated.max - updated.min)
    return updated


def pad_range(stats: Stats, pad_fraction: float) -> Stats:
    """Widen min and max by ``pad_fraction`` of the range on each side."""
    return replace(
        stats,
        min=stats.min - stats.range * pad_fraction,
        max=stats.max + stats.range * pad_fraction,
        range=stats.range * (1 + pad_fraction * 2),
    )


def sigma_filter(records: Sequence[Any], accessor: AccessorLike, threshold: float) -> List[Any]:
    """
    Keep records within ``threshold`` standard deviations of the mean.

    Records with a missing value are dropped, and so is everything when the
    standard deviation is undefined or zero.
    """
    accessor = resolve_accessor(accessor)
    stats = attr_stats(records, accessor)
    if not stats.stdev or stats.mean is None:
        logger.debug("sigma_filter on %s: no spread, dropping all %d records", accessor, len(records))
        return []

    values = finite_values(records, accessor)
    with np.errstate(invalid='ignore'):
        keep = np.abs(values - stats.mean) / stats.stdev <= threshold
    return [record for record, kept in zip(records, keep) if kept]

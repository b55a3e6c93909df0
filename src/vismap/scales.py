"""
Scale builder - two-stage mapping from raw values to plotting space.

Stage one (``attr_scale``) normalizes an accessor's value to [0, 1] using the
statistics of the record set. Stage two (``build_scale``) stretches the
normalized value over a pixel span, optionally inverted for vertical axes.
Missing values come out as None at every stage.
"""

from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence

from .accessors import Accessor, AccessorLike, attribute_number, resolve_accessor
from .stats import Stats, StatsView, attr_stats, override_stats


def scale_to(value: Optional[float], stats: Stats) -> Optional[float]:
    """Normalize a value against a statistics range; 0 for a degenerate range."""
    if value is None:
        return None
    if stats.max == stats.min or not stats.range:
        return 0.0
    return (value - stats.min) / stats.range


class Scale(StatsView):
    """
    Callable normalizing a record's value into [0, 1].

    All statistic fields are readable as attributes (``scale.min``,
    ``scale.stdev``...). ``accessor`` refers back to the accessor the scale
    was built from.
    """

    def __init__(self, stats: Stats, accessor: Accessor):
        self.stats = stats
        self.accessor = accessor

    def value(self, record: Any) -> Optional[float]:
        """Raw (unscaled) value of a record, or None."""
        return attribute_number(record, self.accessor)

    def __call__(self, record: Any) -> Optional[float]:
        return scale_to(self.value(record), self.stats)

    def __repr__(self):
        return f"<Scale {self.accessor} [{self.stats.min}, {self.stats.max}]>"


class PixelScale(StatsView):
    """
    A Scale stretched over a pixel span.

    Statistics are re-expressed in pixels: min 0, max and range equal to the
    span, sum/mean/median multiplied by it. Variance and stdev are None since
    they do not scale linearly.
    """

    def __init__(self, scale, pixel_span: float, invert: bool = False):
        self.scale = scale
        self.pixel_span = pixel_span
        self.invert = invert
        self.accessor = getattr(scale, 'accessor', None)

        source = scale.stats
        self.stats = replace(
            source,
            min=0.0,
            max=pixel_span,
            range=pixel_span,
            sum=source.sum * pixel_span,
            mean=source.mean * pixel_span if source.mean is not None else None,
            variance=None,
            stdev=None,
            median=source.median * pixel_span if source.median is not None else None,
        )

    def __call__(self, record: Any) -> Optional[float]:
        scaled = self.scale(record)
        if scaled is None:
            return None
        if self.invert:
            return self.pixel_span - self.pixel_span * scaled
        return self.pixel_span * scaled

    def __repr__(self):
        direction = "inverted " if self.invert else ""
        return f"<PixelScale {self.accessor} {direction}0..{self.pixel_span}>"


def attr_scale(records: Sequence[Any], accessor: AccessorLike,
               override: Optional[Mapping[str, float]] = None) -> Scale:
    """
    Build a normalizing scale from the statistics of an accessor.

    Args:
        records: Records used to compute the statistics
        accessor: Field name or function producing a number
        override: Optional statistic fields to pin, e.g. {"min": 0, "max": 100}

    Returns:
        Scale mapping records to [0, 1] (0 for a single-valued range, None for missing values)

    Examples:
        scale = attr_scale(rows, "temperature")
        percent = attr_scale(rows, "share", {"min": 0, "max": 100})
    """
    accessor = resolve_accessor(accessor)
    stats = override_stats(attr_stats(records, accessor), override)
    return Scale(stats, accessor)


def build_scale(scale, pixel_span: float, invert: bool = False) -> PixelScale:
    """
    Re-express a normalizing scale over a pixel span.

    Args:
        scale: Scale from ``attr_scale`` (or any object with ``stats`` that is callable)
        pixel_span: Target span in pixels, e.g. plot width
        invert: Map the minimum to ``pixel_span`` and the maximum to 0 (vertical axes)

    Returns:
        PixelScale
    """
    return PixelScale(scale, pixel_span, invert)

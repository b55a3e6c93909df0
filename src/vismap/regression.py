"""
Least-squares line through two numeric attributes.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np

from .accessors import Accessor, AccessorLike, attribute_number, resolve_accessor


@dataclass(frozen=True)
class LinearRegression:
    """Fitted line ``y = m * x + b``."""
    m: float
    b: float
    x: Accessor

    def __call__(self, value: float) -> float:
        return self.m * value + self.b

    def predict(self, record: Any) -> Optional[float]:
        value = attribute_number(record, self.x)
        return None if value is None else self(value)


def linear_regression(records: Sequence[Any], x: AccessorLike, y: AccessorLike) -> LinearRegression:
    """
    Fit a straight line over the records with finite x and y values.

    Raises:
        ValueError: If fewer than two usable points remain, or all x values are equal
    """
    x = resolve_accessor(x)
    y = resolve_accessor(y)
    pairs = [
        (xv, yv) for xv, yv in
        ((attribute_number(r, x), attribute_number(r, y)) for r in records)
        if xv is not None and yv is not None
    ]
    if len(pairs) < 2:
        raise ValueError("Linear regression needs at least two finite (x, y) pairs")

    xs, ys = (np.array(column, dtype=float) for column in zip(*pairs))
    if np.all(xs == xs[0]):
        raise ValueError("Linear regression needs at least two distinct x values")

    m, b = np.polyfit(xs, ys, 1)
    return LinearRegression(m=float(m), b=float(b), x=x)

"""
Convolution smoothing of a numeric attribute.

Kernel weights are memoized in a ``KernelCache``. The module-level
``KERNEL_CACHE`` is shared by default and can be cleared, or a private cache
can be passed to ``smooth``.
"""

import copy
import math
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .accessors import AccessorLike, attribute_number, resolve_accessor


def gaussian(x: float, sigma: float) -> float:
    return (1 / (sigma * math.sqrt(2 * math.pi))) * math.exp(-0.5 * (x / sigma) ** 2)


def moving_window(x: float, half_window: float) -> float:
    half = math.ceil(half_window)
    return 1 / (half * 2 + 1) if abs(x) <= half else 0.0


def triangular(x: float, half_window: float) -> float:
    return max(0.0, half_window - abs(x)) / half_window ** 2


KERNELS: Dict[str, Callable[[float, float], float]] = {
    'gaussian': gaussian,
    'moving_window': moving_window,
    'triangular': triangular,
}

Kernel = Union[str, Callable[[float, float], float]]


class KernelCache:
    """Memo of kernel weights per (kernel, size), grown on demand."""

    def __init__(self):
        self._weights: Dict[Tuple[Callable, float], np.ndarray] = {}

    def weights(self, kernel: Callable[[float, float], float], size: float, count: int) -> np.ndarray:
        """Weights of ``kernel`` at offsets ``0 .. count - 1``."""
        key = (kernel, size)
        cached = self._weights.get(key)
        if cached is None or len(cached) < count:
            start = 0 if cached is None else len(cached)
            extra = np.array([kernel(n, size) for n in range(start, count)], dtype=float)
            cached = extra if cached is None else np.concatenate([cached, extra])
            self._weights[key] = cached
        return cached[:count]

    def clear(self):
        self._weights.clear()

    def __len__(self):
        return len(self._weights)


KERNEL_CACHE = KernelCache()


def _resolve_kernel(kernel: Kernel) -> Callable[[float, float], float]:
    if callable(kernel):
        return kernel
    if kernel not in KERNELS:
        raise ValueError(f"Unknown kernel '{kernel}'. Available kernels: {', '.join(KERNELS)}")
    return KERNELS[kernel]


def convolve(values: Sequence[float], kernel: Callable[[float, float], float], size: float,
             cache: Optional[KernelCache] = None) -> np.ndarray:
    """
    Symmetric convolution: ``out[j] = sum(values[i] * kernel(|j - i|, size))``.

    Non-finite inputs contribute nothing.
    """
    cache = cache if cache is not None else KERNEL_CACHE
    data = np.asarray(values, dtype=float)
    n = len(data)
    if n == 0:
        return data
    data = np.where(np.isfinite(data), data, 0.0)
    half = cache.weights(kernel, size, n)
    symmetric = np.concatenate([half[:0:-1], half])
    return np.convolve(data, symmetric, mode='full')[n - 1:2 * n - 1]


def _with_value(record: Any, name: str, value: float) -> Any:
    if isinstance(record, Mapping):
        return {**record, name: value}
    updated = copy.copy(record)
    setattr(updated, name, value)
    return updated


def smooth(records: Sequence[Any], on: AccessorLike, as_: Optional[str] = None,
           kernel: Kernel = 'gaussian', size: float = 1,
           cache: Optional[KernelCache] = None) -> List[Any]:
    """
    Smooth a numeric attribute with a convolution kernel.

    The series is padded with ``3 * size`` copies of its first and last
    values so the ends are not pulled towards zero.

    Args:
        records: Records in series order
        on: Accessor of the value to smooth
        as_: Field name receiving the smoothed value (default: the ``on`` field name)
        kernel: 'gaussian', 'moving_window', 'triangular' or a callable ``(offset, size)``
        size: Kernel width (sigma or half window)
        cache: Optional KernelCache (default: the shared KERNEL_CACHE)

    Returns:
        New records carrying the smoothed value; an empty list when size is 0

    Raises:
        ValueError: If the kernel name is unknown or no target field can be named
    """
    fn = _resolve_kernel(kernel)
    accessor = resolve_accessor(on)
    if as_ is None:
        if not isinstance(on, str):
            raise ValueError("as_ is required when smoothing a computed value")
        as_ = on
    if size == 0 or not records:
        return []

    values = [attribute_number(record, accessor) for record in records]
    values = [math.nan if v is None else v for v in values]
    pad = int(math.ceil(size * 3))
    padded = [values[0]] * pad + values + [values[-1]] * pad

    smoothed = convolve(padded, fn, size, cache)[pad:pad + len(records)]
    return [_with_value(record, as_, float(value)) for record, value in zip(records, smoothed)]

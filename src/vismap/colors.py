"""
Color helpers - parsing, perceptual differences, gradient ids and color scales.
"""

import re
from functools import lru_cache
from typing import Any, Mapping, Optional, Sequence, Tuple

import numpy as np
from matplotlib import colormaps
from matplotlib.colors import to_hex, to_rgb
from skimage.color import deltaE_cie76, deltaE_ciede2000, rgb2lab

from .accessors import AccessorLike, attribute_number
from .scales import attr_scale

# Scheme names accepted by build_color_scale, mapped to matplotlib colormaps
COLOR_SCHEMES = {
    'BrBG': 'BrBG',
    'PRGn': 'PRGn',
    'PiYG': 'PiYG',
    'PuOr': 'PuOr',
    'RdBu': 'RdBu',
    'RdGy': 'RdGy',
    'RdYlBu': 'RdYlBu',
    'RdYlGn': 'RdYlGn',
    'YlOrRd': 'YlOrRd',
    'spectral': 'Spectral',
    'viridis': 'viridis',
    'inferno': 'inferno',
    'magma': 'magma',
    'plasma': 'plasma',
    'cool': 'cool',
    'cubehelix': 'cubehelix',
    'rainbow': 'rainbow',
    'turbo': 'turbo',
}

DEFAULT_COLOR_SCHEME = 'turbo'

_CSS_RGB = re.compile(r'^rgba?\(\s*([^)]*)\)$', re.IGNORECASE)
_GRADIENT_UNSAFE = re.compile(r'[()#, ]+')


@lru_cache(maxsize=1024)
def parse_color(color: str) -> Tuple[float, float, float]:
    """
    Parse a color string into an RGB triple in [0, 1].

    Accepts everything matplotlib understands (named colors, hex codes) plus
    CSS ``rgb(r, g, b)`` / ``rgba(r, g, b, a)`` strings. Alpha is ignored.

    Raises:
        ValueError: If the color cannot be parsed
    """
    match = _CSS_RGB.match(color.strip())
    if match:
        parts = [p.strip() for p in match.group(1).split(',')]
        if len(parts) not in (3, 4):
            raise ValueError(f"Invalid CSS color: {color!r}")
        try:
            r, g, b = (float(p) / 255.0 for p in parts[:3])
        except ValueError:
            raise ValueError(f"Invalid CSS color: {color!r}")
        return (min(max(r, 0.0), 1.0), min(max(g, 0.0), 1.0), min(max(b, 0.0), 1.0))
    return tuple(to_rgb(color))


@lru_cache(maxsize=1024)
def _lab(color: str) -> np.ndarray:
    rgb = np.array([[parse_color(color)]], dtype=float)
    return rgb2lab(rgb)[0]


def delta_e(color1: str, color2: str) -> float:
    """CIEDE2000 perceptual difference between two colors."""
    return float(deltaE_ciede2000(_lab(color1), _lab(color2))[0])


def lab_distance(color1: str, color2: str) -> float:
    """Euclidean distance between two colors in CIELAB space."""
    return float(deltaE_cie76(_lab(color1), _lab(color2))[0])


def dissimilar_colors(color1: Optional[str], color2: Optional[str],
                      distance: float, color_resolution: float) -> bool:
    """
    Decide whether a color transition over ``distance`` pixels needs a gradient.

    The color difference is weighted by the pixel distance, so two far apart
    points need a smaller color change to count as different.
    """
    if color1 == color2:
        return False
    if not color1 or not color2:
        return True
    diff = min(delta_e(color1, color2), lab_distance(color1, color2))
    return diff * distance > color_resolution


def gradient_name(color1: str, color2: str) -> str:
    """Canonical gradient id for a color pair, safe for use in ``url(#...)``."""
    return f"gradient-{_GRADIENT_UNSAFE.sub('-', color1)}-{_GRADIENT_UNSAFE.sub('-', color2)}"


class ColorScale:
    """Callable mapping a record to a hex color through a named colormap."""

    def __init__(self, stat_scale, scheme: str, null_color: str):
        self.stat_scale = stat_scale
        self.scheme = scheme
        self.null_color = null_color
        self.accessor = stat_scale.accessor
        self._cmap = colormaps[COLOR_SCHEMES[scheme]]

    def value(self, record: Any) -> Optional[float]:
        return attribute_number(record, self.accessor)

    def __call__(self, record: Any) -> str:
        scaled = self.stat_scale(record)
        if scaled is None:
            return self.null_color
        return to_hex(self._cmap(scaled))

    def __repr__(self):
        return f"<ColorScale {self.accessor} {self.scheme}>"


def build_color_scale(records: Sequence[Any], accessor: AccessorLike,
                      scheme: str = DEFAULT_COLOR_SCHEME, null_color: str = 'black',
                      override: Optional[Mapping[str, float]] = None) -> ColorScale:
    """
    Build a color scale over a numeric dimension.

    Args:
        records: Records used to compute the value range
        accessor: Field name or function producing a number
        scheme: Color scheme name (see COLOR_SCHEMES, default: 'turbo')
        null_color: Color for records without a finite value
        override: Optional statistic fields to pin on the value range

    Returns:
        ColorScale

    Raises:
        ValueError: If the scheme is unknown
    """
    if scheme not in COLOR_SCHEMES:
        raise ValueError(f"Unknown color scheme '{scheme}'. "
                         f"Available schemes: {', '.join(COLOR_SCHEMES)}")
    return ColorScale(attr_scale(records, accessor, override), scheme, null_color)

"""
Shared configuration objects and logging setup for vismap.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional


LOG_FORMAT = '%(asctime)s - %(levelname)5s | %(name)s | %(message)s'


def setup_logger(name: str, level: str = "INFO") -> logging.Logger:
    """
    Set up a logger with a single console stream handler.

    Repeated calls reuse the existing handler instead of stacking new ones.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(log_level)
        logger.addHandler(handler)

    return logger


@dataclass
class ChartConfig:
    """Shared configuration for chart titles and dimensions."""
    title: Optional[str] = None
    width: int = 320
    height: int = 240


@dataclass
class SegmentConfig:
    """
    Options recognized by the line compression engine.

    Attributes:
        resolution: Minimum pixel spacing before a point is kept for distance alone
        stroke_width: Line width in pixels; points closer than this are never kept
        color_resolution: Threshold for the distance-weighted color difference
        continuity: Optional boolean accessor marking continuous points
        override: Optional partial statistics per axis, keyed "x", "y" or "color"
    """
    resolution: float = 0
    stroke_width: float = 5
    color_resolution: float = 5
    continuity: Any = None
    override: Optional[Dict[str, Dict[str, float]]] = None

    def __post_init__(self):
        for name in ('resolution', 'stroke_width', 'color_resolution'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a finite non-negative number, got {value!r}")

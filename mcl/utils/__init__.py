"""
Utility modules shared across the localization filter.

This package provides:
- Frame transforms (geometry.py)
- Bivariate Gaussian density (gaussian.py)
- Filter configuration (config.py)
- Logging configuration (logging_config.py)
"""

from __future__ import annotations

from mcl.utils.geometry import (
    transform_to_map,
    transform_to_vehicle,
    normalize_angle,
)

from mcl.utils.gaussian import gaussian_2d_pdf

from mcl.utils.tensors import as_float64

from mcl.utils.config import (
    FilterConfig,
    load_config,
    parse_config,
)

from mcl.utils.logging_config import (
    get_logger,
    setup_logging,
    set_level,
)

__all__ = [
    # Geometry
    "transform_to_map",
    "transform_to_vehicle",
    "normalize_angle",
    # Probability
    "gaussian_2d_pdf",
    "as_float64",
    # Configuration
    "FilterConfig",
    "load_config",
    "parse_config",
    # Logging
    "get_logger",
    "setup_logging",
    "set_level",
]

"""
Metrics for evaluating the localization filter.

This package provides metrics for:
- Accuracy: pose error, RMSE
- Particle filter diagnostics: ESS, weighted mean pose
"""

from __future__ import annotations

from mcl.metrics.accuracy import (
    compute_rmse,
    pose_error,
)

from mcl.metrics.particle_filter_metrics import (
    compute_effective_sample_size,
    weighted_mean_pose,
)

__all__ = [
    # Accuracy metrics
    'compute_rmse',
    'pose_error',
    # Particle filter metrics
    'compute_effective_sample_size',
    'weighted_mean_pose',
]

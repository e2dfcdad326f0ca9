"""
Particle filter and resampling for landmark localization.
"""

from mcl.filters.particle_filter import ParticleFilter
from mcl.filters.resampling import (
    resample_particles,
    uniform_resample,
    wheel_resample,
)

__all__ = ['ParticleFilter', 'resample_particles', 'uniform_resample', 'wheel_resample']

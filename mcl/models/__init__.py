"""
Data model, motion model and observation model for landmark localization.
"""

from mcl.models.particles import Landmark, LandmarkMap, Particle, ParticleSet
from mcl.models.motion_model import move, sample_motion
from mcl.models.observation_model import (
    associate,
    compute_weights,
    nearest_landmark_indices,
)

__all__ = [
    'Landmark', 'LandmarkMap', 'Particle', 'ParticleSet',
    'move', 'sample_motion',
    'associate', 'compute_weights', 'nearest_landmark_indices',
]

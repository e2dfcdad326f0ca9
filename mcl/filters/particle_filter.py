"""
Monte Carlo localization with a particle filter.

Each time step runs three stages over the whole particle set:

1. ``predict``        -- move every particle with the bicycle model plus noise
2. ``update_weights`` -- score every particle against the landmark map
3. ``resample``       -- redraw the set proportionally to the weights

``initialize`` must be called once before the first prediction.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import tensorflow as tf

from mcl.errors import (
    AlreadyInitialized, InvalidParticleCount, NotInitialized, StaleWeights
)
from mcl.filters.resampling import resample_particles
from mcl.metrics.particle_filter_metrics import compute_effective_sample_size
from mcl.models.motion_model import sample_motion
from mcl.models.observation_model import compute_weights
from mcl.models.particles import LandmarkMap, Particle, ParticleSet
from mcl.utils.config import FilterConfig
from mcl.utils.logging_config import get_logger
from mcl.utils.tensors import as_float64

logger = get_logger(__name__)


class ParticleFilter:
    """
    Particle filter estimating a planar pose (x, y, theta) from controls and
    landmark observations.

    Parameters
    ----------
    num_particles : int, optional
        Number of particles. Defaults to 100.
    seed : int, optional
        Seed of the filter's random generator. The same generator is used by
        every stage for the lifetime of the filter. None seeds it
        non-deterministically.

    Attributes
    ----------
    num_particles : int
        Number of particles; constant for the lifetime of the filter.
    generator : tf.random.Generator
        Random source shared by initialization, prediction and resampling.
    particles : ParticleSet
        Current particle set (raises ``NotInitialized`` before
        ``initialize``).
    is_initialized : bool
        Whether ``initialize`` has run.

    Examples
    --------
    >>> pf = ParticleFilter(num_particles=100, seed=42)
    >>> pf.initialize(6.0, 2.0, 0.1, [0.3, 0.3, 0.01])
    >>> pf.predict(0.1, [0.3, 0.3, 0.01], velocity=2.0, yaw_rate=0.05)
    >>> pf.update_weights(50.0, [0.3, 0.3], observations, landmark_map)
    >>> pf.resample()
    >>> best = pf.best_particle()
    """

    def __init__(self, num_particles: int = 100, seed: Optional[int] = None):
        if isinstance(num_particles, bool) or not isinstance(num_particles, int) \
                or num_particles <= 0:
            raise InvalidParticleCount(
                f"Number of particles must be a positive integer, got {num_particles!r}"
            )
        self.num_particles = num_particles
        if seed is None:
            self.generator = tf.random.Generator.from_non_deterministic_state()
        else:
            self.generator = tf.random.Generator.from_seed(seed)
        self.is_initialized = False
        self._particles: Optional[ParticleSet] = None
        # True only between update_weights and the next predict or resample
        self._weights_fresh = False

    @classmethod
    def from_config(cls, config: FilterConfig) -> "ParticleFilter":
        return cls(num_particles=config.num_particles, seed=config.seed)

    @property
    def particles(self) -> ParticleSet:
        self._require_initialized("particles")
        return self._particles

    def _require_initialized(self, stage: str) -> None:
        if not self.is_initialized:
            raise NotInitialized(f"{stage} called before initialize()")

    def initialize(self, x: float, y: float, theta: float,
                   std: Sequence[float]) -> None:
        """
        Sample the initial particle set around a pose estimate.

        Each coordinate is drawn independently from N(estimate, std[axis]^2);
        all weights start at 1.

        Parameters
        ----------
        x, y, theta : float
            Initial pose estimate (e.g. from GPS).
        std : sequence of float
            Standard deviations [x, y, theta], non-negative.

        Raises
        ------
        AlreadyInitialized
            If the filter already holds particles.
        ValueError
            If ``std`` does not have three non-negative entries.
        """
        if self.is_initialized:
            raise AlreadyInitialized("initialize() may only be called once")

        std = tf.reshape(as_float64(std), [-1])
        if std.shape[0] != 3:
            raise ValueError(f"std needs 3 entries, got {std.shape[0]}")
        if bool(tf.reduce_any(std < 0.0)):
            raise ValueError(f"std must be non-negative, got {std.numpy().tolist()}")

        mean = tf.constant([x, y, theta], dtype=tf.float64)
        noise = self.generator.normal([self.num_particles, 3], dtype=tf.float64)
        self._particles = ParticleSet.create(mean + noise * std)
        self.is_initialized = True
        self._weights_fresh = False

        logger.info("Initialized %d particles around (%.3f, %.3f, %.3f)",
                    self.num_particles, x, y, theta)

    def predict(self, delta_t: float, std_pos: Sequence[float],
                velocity: float, yaw_rate: float) -> None:
        """
        Move every particle with the bicycle model and add process noise.

        Parameters
        ----------
        delta_t : float
            Time since the last step (s).
        std_pos : sequence of float
            Process noise standard deviations [x, y, theta].
        velocity : float
            Linear velocity (m/s).
        yaw_rate : float
            Yaw rate (rad/s).
        """
        self._require_initialized("predict")
        poses = sample_motion(self._particles.poses, delta_t, std_pos,
                              velocity, yaw_rate, self.generator)
        self._particles = self._particles.with_poses(poses)
        self._weights_fresh = False
        logger.debug("Predicted %d particles: dt=%.3f v=%.3f yaw_rate=%.4f",
                     self.num_particles, delta_t, velocity, yaw_rate)

    def update_weights(self, sensor_range: float, std_landmark: Sequence[float],
                       observations, landmark_map: LandmarkMap) -> float:
        """
        Recompute every particle weight from a batch of observations.

        Parameters
        ----------
        sensor_range : float
            Sensor range (m). Must be positive; observations are not gated on
            it.
        std_landmark : sequence of float
            Landmark measurement standard deviations [x, y].
        observations : array-like
            Vehicle-frame observations of shape (M, 2).
        landmark_map : LandmarkMap
            Known landmarks.

        Returns
        -------
        float
            Maximum weight across the set after the update.

        Raises
        ------
        NotInitialized
            Before ``initialize``.
        EmptyMap
            If the map holds no landmarks.
        InvalidWeights
            If the weight product overflows float64. The particle set is left
            unchanged.
        """
        self._require_initialized("update_weights")
        if sensor_range <= 0:
            raise ValueError(f"sensor_range must be positive, got {sensor_range}")

        weights, max_weight, associated_ids, sense = compute_weights(
            self._particles.poses, observations, landmark_map, std_landmark
        )
        self._particles = self._particles.with_weights(
            weights, associations=associated_ids, sense=sense
        )
        self._weights_fresh = True

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Updated weights: max=%.3e ESS=%.1f",
                         max_weight, float(compute_effective_sample_size(weights)))
        return max_weight

    def resample(self) -> None:
        """
        Replace the particle set by a weight-proportional draw of itself.

        Raises
        ------
        NotInitialized
            Before ``initialize``.
        StaleWeights
            If ``update_weights`` has not run since the particles last
            changed, so the weights and their maximum describe poses the set
            no longer holds.
        """
        self._require_initialized("resample")
        if not self._weights_fresh:
            raise StaleWeights(
                "resample() needs weights from update_weights() on the current particles"
            )
        self._particles = resample_particles(self._particles, self.generator)
        self._weights_fresh = False
        logger.debug("Resampled %d particles", self.num_particles)

    def best_particle(self) -> Particle:
        """Highest-weight particle; the first one wins on ties."""
        self._require_initialized("best_particle")
        weights = self._particles.weights
        index = int(tf.where(weights >= tf.reduce_max(weights))[0, 0])
        return self._particles[index]

    @staticmethod
    def set_associations(particle: Particle, associations: Sequence[int],
                         sense_x: Sequence[float], sense_y: Sequence[float]) -> None:
        """
        Attach landmark associations to a particle for reporting.

        Parameters
        ----------
        particle : Particle
            Particle to annotate.
        associations : sequence of int
            Landmark id of each association.
        sense_x, sense_y : sequence of float
            Map-frame coordinates of each associated observation.

        Notes
        -----
        Particles returned by ``particles[i]`` or ``best_particle()`` are
        detached copies. Annotating one does not change the association
        data recorded in the filter's particle set, which ``update_weights``
        fills in for every particle.
        """
        if not len(associations) == len(sense_x) == len(sense_y):
            raise ValueError(
                f"Association lengths differ: {len(associations)} ids, "
                f"{len(sense_x)} x, {len(sense_y)} y"
            )
        particle.associations = [int(a) for a in associations]
        particle.sense_x = [float(v) for v in sense_x]
        particle.sense_y = [float(v) for v in sense_y]

    @staticmethod
    def get_associations(particle: Particle) -> str:
        """Landmark ids of ``particle`` separated by single spaces."""
        return " ".join(str(a) for a in particle.associations)

    @staticmethod
    def get_sense_coord(particle: Particle, coord: str) -> str:
        """
        Sense coordinates of ``particle`` separated by single spaces.

        ``coord`` selects the axis: "X" or "Y".
        """
        if coord == "X":
            values = particle.sense_x
        elif coord == "Y":
            values = particle.sense_y
        else:
            raise ValueError(f"coord must be 'X' or 'Y', got {coord!r}")
        return " ".join(f"{v:g}" for v in values)

"""
Resampling for the localization particle filter.

Supported Methods
-----------------
- Wheel: roulette-wheel resampling driven by the maximum weight, O(N)
  amortized, used by the filter.
- Uniform: every particle equally likely, the fallback when all weights
  are zero.

Resampling wheel
----------------
Particles are laid out around a wheel, each occupying an arc as long as its
weight. A pointer starts at a random particle and a random offset; for each
of the N draws it advances by U[0, max_weight) and the particle under the
pointer is copied into the new set. Because the starting offset is uniform
over the whole circumference, every draw selects particle i with
probability w_i / sum(w).

References
----------
- Thrun, S., Burgard, W., & Fox, D. (2005). "Probabilistic Robotics", ch. 4.3
"""

from __future__ import annotations

import math
from typing import Optional

import tensorflow as tf

from mcl.errors import DegenerateWeights, InvalidParticleCount, InvalidWeights
from mcl.models.particles import ParticleSet
from mcl.utils.logging_config import get_logger
from mcl.utils.tensors import as_float64

logger = get_logger(__name__)


# =============================================================================
# Core Resampling Algorithms
# =============================================================================


def wheel_resample(weights: tf.Tensor, max_weight: Optional[float] = None,
                   generator: Optional[tf.random.Generator] = None) -> tf.Tensor:
    """
    Resampling wheel.

    Parameters
    ----------
    weights : tf.Tensor
        Non-negative, unnormalized particle weights of shape (N,).
    max_weight : float, optional
        Maximum of ``weights`` as computed by the weighting pass. Checked
        against the weights; computed here when omitted.
    generator : tf.random.Generator, optional
        Source of randomness. Defaults to the global generator.

    Returns
    -------
    tf.Tensor
        Resampled indices of shape (N,), dtype int32.

    Raises
    ------
    InvalidParticleCount
        If ``weights`` is empty.
    InvalidWeights
        If a weight is negative or not finite, or ``max_weight`` is not the
        maximum of ``weights``.
    DegenerateWeights
        If every weight is zero.

    Examples
    --------
    >>> gen = tf.random.Generator.from_seed(42)
    >>> indices = wheel_resample(tf.constant([0.1, 0.2, 0.3, 0.4]), generator=gen)
    >>> resampled_poses = tf.gather(poses, indices)
    """
    weights = tf.reshape(as_float64(weights), [-1])
    n = int(weights.shape[0])
    if n == 0:
        raise InvalidParticleCount("Cannot resample an empty particle set")
    if not bool(tf.reduce_all(tf.math.is_finite(weights))):
        raise InvalidWeights("Particle weights must be finite")
    if bool(tf.reduce_any(weights < 0.0)):
        raise InvalidWeights("Particle weights must be non-negative")

    true_max = float(tf.reduce_max(weights))
    if true_max <= 0.0:
        raise DegenerateWeights(f"All {n} particle weights are zero")
    if max_weight is None:
        max_weight = true_max
    elif not math.isclose(max_weight, true_max, rel_tol=1e-9):
        raise InvalidWeights(
            f"Stale max weight {max_weight!r}, current maximum is {true_max!r}"
        )

    if generator is None:
        generator = tf.random.get_global_generator()

    index = int(generator.uniform([], minval=0, maxval=n, dtype=tf.int32))
    total = float(tf.reduce_sum(weights))
    b = float(generator.uniform([], minval=0.0, maxval=total, dtype=tf.float64))
    steps = generator.uniform([n], minval=0.0, maxval=max_weight,
                              dtype=tf.float64).numpy()
    w = weights.numpy()

    indices = []
    for step in steps:
        b += step
        while b > w[index]:
            b -= w[index]
            index = (index + 1) % n
        indices.append(index)

    return tf.constant(indices, dtype=tf.int32)


def uniform_resample(num_particles: int,
                     generator: Optional[tf.random.Generator] = None) -> tf.Tensor:
    """
    Draw ``num_particles`` indices uniformly from [0, num_particles).

    Returns
    -------
    tf.Tensor
        Resampled indices of shape (num_particles,), dtype int32.
    """
    if num_particles <= 0:
        raise InvalidParticleCount(
            f"Number of particles must be positive, got {num_particles}"
        )
    if generator is None:
        generator = tf.random.get_global_generator()
    return generator.uniform([num_particles], minval=0, maxval=num_particles,
                             dtype=tf.int32)


def resample_particles(particle_set: ParticleSet,
                       generator: Optional[tf.random.Generator] = None) -> ParticleSet:
    """
    Draw a new particle set of the same size with the resampling wheel.

    Copies keep their pose, id, weight and association metadata. When every
    weight is zero the wheel cannot select anything, so indices are drawn
    uniformly instead and a warning is logged.

    Parameters
    ----------
    particle_set : ParticleSet
        Current particles, with ``max_weight`` from the latest weighting.
    generator : tf.random.Generator, optional
        Source of randomness.

    Returns
    -------
    ParticleSet
        The resampled set.
    """
    try:
        indices = wheel_resample(particle_set.weights,
                                 max_weight=particle_set.max_weight,
                                 generator=generator)
    except DegenerateWeights as exc:
        logger.warning("%s; falling back to uniform resampling", exc)
        indices = uniform_resample(len(particle_set), generator=generator)

    return particle_set.gather(indices)

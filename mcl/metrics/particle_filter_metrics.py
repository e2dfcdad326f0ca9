"""
Particle set diagnostics.

Effective sample size and the weighted pose estimate, used for logging the
filter state and for reporting a single pose per time step.
"""

from __future__ import annotations

import tensorflow as tf

from mcl.models.particles import ParticleSet
from mcl.utils.tensors import as_float64


def compute_effective_sample_size(weights: tf.Tensor) -> tf.Tensor:
    """
    Compute Effective Sample Size (ESS) for particle weights.

    The weights are normalized first, then

        ESS = 1 / sum(w_i^2)

    Parameters
    ----------
    weights : tf.Tensor
        Non-negative, possibly unnormalized weights of shape (num_particles,).

    Returns
    -------
    ess : tf.Tensor
        Effective sample size (scalar, float64). 0 when every weight is zero.

    Examples
    --------
    >>> weights = tf.constant([0.1, 0.2, 0.3, 0.4], dtype=tf.float64)
    >>> ess = compute_effective_sample_size(weights)
    >>> print(f"ESS: {ess:.2f}")
    ESS: 3.33

    Notes
    -----
    ESS ranges from 1 (one particle holds all the weight) to num_particles
    (uniform weights).
    """
    weights = as_float64(weights)
    total = tf.reduce_sum(weights)
    if float(total) <= 0.0:
        return tf.constant(0.0, dtype=tf.float64)
    normalized = weights / total
    return 1.0 / tf.reduce_sum(normalized ** 2)


def weighted_mean_pose(particle_set: ParticleSet) -> tf.Tensor:
    """
    Weighted mean pose of a particle set.

    Position is the weighted arithmetic mean; heading is the weighted
    circular mean, so hypotheses on both sides of +-pi average correctly.
    Falls back to uniform weights when every weight is zero.

    Returns
    -------
    tf.Tensor
        Pose [x, y, theta] of shape (3,), theta in (-pi, pi].
    """
    weights = particle_set.weights
    total = tf.reduce_sum(weights)
    if float(total) <= 0.0:
        weights = tf.ones_like(weights)
        total = tf.reduce_sum(weights)
    weights = weights / total

    poses = particle_set.poses
    x = tf.reduce_sum(weights * poses[:, 0])
    y = tf.reduce_sum(weights * poses[:, 1])
    theta = tf.math.atan2(tf.reduce_sum(weights * tf.sin(poses[:, 2])),
                          tf.reduce_sum(weights * tf.cos(poses[:, 2])))
    return tf.stack([x, y, theta])

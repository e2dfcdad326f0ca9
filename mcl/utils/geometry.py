"""
Planar frame transforms between the vehicle frame and the map frame.

All functions broadcast, so a pose of shape (N, 1) against observations of
shape (1, M) yields (N, M) results.
"""

from __future__ import annotations

import math

import tensorflow as tf

from mcl.utils.tensors import as_float64


def transform_to_map(particle_x, particle_y, particle_theta,
                     obs_x, obs_y) -> tuple[tf.Tensor, tf.Tensor]:
    """
    Transform a vehicle-frame point into the map frame.

    The point is first rotated by the vehicle heading and then translated by
    the vehicle position:

        x_m = x_p + cos(theta) * x_o - sin(theta) * y_o
        y_m = y_p + sin(theta) * x_o + cos(theta) * y_o

    Parameters
    ----------
    particle_x, particle_y, particle_theta : tf.Tensor or float
        Pose of the vehicle in the map frame.
    obs_x, obs_y : tf.Tensor or float
        Point in the vehicle frame.

    Returns
    -------
    map_x, map_y : tf.Tensor
        Point in the map frame (float64).
    """
    particle_x = as_float64(particle_x)
    particle_y = as_float64(particle_y)
    particle_theta = as_float64(particle_theta)
    obs_x = as_float64(obs_x)
    obs_y = as_float64(obs_y)

    cos_t = tf.cos(particle_theta)
    sin_t = tf.sin(particle_theta)

    map_x = particle_x + cos_t * obs_x - sin_t * obs_y
    map_y = particle_y + sin_t * obs_x + cos_t * obs_y
    return map_x, map_y


def transform_to_vehicle(particle_x, particle_y, particle_theta,
                         map_x, map_y) -> tuple[tf.Tensor, tf.Tensor]:
    """
    Inverse of ``transform_to_map``: translate by -position, rotate by -theta.
    """
    particle_x = as_float64(particle_x)
    particle_y = as_float64(particle_y)
    particle_theta = as_float64(particle_theta)
    dx = as_float64(map_x) - particle_x
    dy = as_float64(map_y) - particle_y

    cos_t = tf.cos(particle_theta)
    sin_t = tf.sin(particle_theta)

    obs_x = cos_t * dx + sin_t * dy
    obs_y = -sin_t * dx + cos_t * dy
    return obs_x, obs_y


def normalize_angle(theta) -> tf.Tensor:
    """Wrap angles into (-pi, pi]."""
    theta = as_float64(theta)
    wrapped = tf.math.atan2(tf.sin(theta), tf.cos(theta))
    # atan2 returns -pi for the negative side of the branch cut
    return tf.where(wrapped <= -math.pi, wrapped + 2.0 * math.pi, wrapped)

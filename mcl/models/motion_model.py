"""
Bicycle motion model with additive Gaussian process noise.

Control inputs are a linear velocity ``v`` and a yaw rate ``omega`` held
constant over ``delta_t``. For ``omega != 0`` the vehicle follows a circular
arc:

    x'     = x + v / omega * (sin(theta + omega * dt) - sin(theta))
    y'     = y + v / omega * (cos(theta) - cos(theta + omega * dt))
    theta' = theta + omega * dt

and for ``omega == 0`` a straight line with unchanged heading. Heading is
never wrapped.
"""

from __future__ import annotations

from typing import Sequence

import tensorflow as tf

from mcl.utils.tensors import as_float64

# Below this yaw rate the arc formula loses precision; use the straight line
YAW_RATE_EPS = 1e-10


def _as_std(std: Sequence[float], size: int, name: str) -> tf.Tensor:
    std = tf.reshape(as_float64(std), [-1])
    if std.shape[0] != size:
        raise ValueError(f"{name} needs {size} entries, got {std.shape[0]}")
    if bool(tf.reduce_any(std < 0.0)):
        raise ValueError(f"{name} must be non-negative, got {std.numpy().tolist()}")
    return std


def move(poses: tf.Tensor, delta_t: float, velocity: float,
         yaw_rate: float) -> tf.Tensor:
    """
    Noiseless motion update.

    Parameters
    ----------
    poses : tf.Tensor
        Poses [x, y, theta] of shape (N, 3) or (3,).
    delta_t : float
        Elapsed time (s).
    velocity : float
        Linear velocity (m/s).
    yaw_rate : float
        Yaw rate (rad/s).

    Returns
    -------
    tf.Tensor
        Predicted poses of shape (N, 3).
    """
    poses = tf.reshape(as_float64(poses), [-1, 3])
    delta_t = float(delta_t)
    velocity = float(velocity)
    yaw_rate = float(yaw_rate)

    x = poses[:, 0]
    y = poses[:, 1]
    theta = poses[:, 2]

    if abs(yaw_rate) < YAW_RATE_EPS:
        x_next = x + velocity * tf.cos(theta) * delta_t
        y_next = y + velocity * tf.sin(theta) * delta_t
        theta_next = theta
    else:
        theta_next = theta + yaw_rate * delta_t
        radius = velocity / yaw_rate
        x_next = x + radius * (tf.sin(theta_next) - tf.sin(theta))
        y_next = y + radius * (tf.cos(theta) - tf.cos(theta_next))

    return tf.stack([x_next, y_next, theta_next], axis=1)


def sample_motion(poses: tf.Tensor, delta_t: float, std_pos: Sequence[float],
                  velocity: float, yaw_rate: float,
                  generator: tf.random.Generator) -> tf.Tensor:
    """
    Motion update followed by per-axis Gaussian process noise.

    Each coordinate of each predicted pose is replaced by an independent
    draw from N(predicted, std_pos[axis]^2).

    Parameters
    ----------
    poses : tf.Tensor
        Poses of shape (N, 3).
    delta_t, velocity, yaw_rate : float
        See ``move``.
    std_pos : sequence of float
        Process noise standard deviations [x, y, theta]; zeros give an exact
        noiseless update.
    generator : tf.random.Generator
        Source of the noise draws.

    Returns
    -------
    tf.Tensor
        Noisy predicted poses of shape (N, 3).
    """
    std_pos = _as_std(std_pos, 3, "std_pos")
    predicted = move(poses, delta_t, velocity, yaw_rate)
    noise = generator.normal(tf.shape(predicted), dtype=tf.float64)
    return predicted + noise * std_pos

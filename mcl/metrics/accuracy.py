"""
Accuracy metrics for pose estimates against ground truth.
"""

from __future__ import annotations

import tensorflow as tf

from mcl.utils.geometry import normalize_angle
from mcl.utils.tensors import as_float64


def pose_error(estimate, ground_truth) -> tf.Tensor:
    """
    Absolute pose error.

    Parameters
    ----------
    estimate : tf.Tensor
        Estimated pose [x, y, theta] of shape (3,) or (T, 3).
    ground_truth : tf.Tensor
        True pose of the same shape.

    Returns
    -------
    tf.Tensor
        [|dx|, |dy|, |dtheta|] with the heading difference wrapped into
        [0, pi], same shape as the inputs.
    """
    estimate = as_float64(estimate)
    ground_truth = as_float64(ground_truth)
    diff = estimate - ground_truth
    dtheta = normalize_angle(diff[..., 2])
    return tf.abs(tf.stack([diff[..., 0], diff[..., 1], dtheta], axis=-1))


def compute_rmse(estimates, ground_truth) -> float:
    """
    Root mean squared error between estimates and ground truth.

    Parameters
    ----------
    estimates : tf.Tensor
        Estimated states of shape (T, n).
    ground_truth : tf.Tensor
        True states of shape (T, n).

    Returns
    -------
    float
        RMSE value.

    Examples
    --------
    >>> x_true = tf.constant([[1.0, 2.0], [3.0, 4.0]])
    >>> x_est = tf.constant([[1.1, 2.1], [2.9, 4.1]])
    >>> rmse = compute_rmse(x_est, x_true)
    >>> print(f"RMSE: {rmse:.4f}")
    RMSE: 0.1000
    """
    estimates = as_float64(estimates)
    ground_truth = as_float64(ground_truth)
    return float(tf.sqrt(tf.reduce_mean((estimates - ground_truth) ** 2)))

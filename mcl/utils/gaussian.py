"""
Bivariate Gaussian density with axis-aligned covariance.
"""

from __future__ import annotations

import tensorflow as tf
import tensorflow_probability as tfp

from mcl.utils.tensors import as_float64

tfd = tfp.distributions


def gaussian_2d_pdf(x, y, mu_x, mu_y, std_x: float, std_y: float) -> tf.Tensor:
    """
    Evaluate N((x, y); (mu_x, mu_y), diag(std_x^2, std_y^2)).

    Equivalent to

        exp(-(dx^2 / (2 std_x^2) + dy^2 / (2 std_y^2))) / (2 pi std_x std_y)

    with no correlation term. All position arguments broadcast.

    Parameters
    ----------
    x, y : tf.Tensor or float
        Point at which the density is evaluated.
    mu_x, mu_y : tf.Tensor or float
        Mean of the distribution.
    std_x, std_y : float
        Standard deviations along each axis. Must be strictly positive.

    Returns
    -------
    tf.Tensor
        Density values (float64), shape of the broadcast inputs.

    Raises
    ------
    ValueError
        If either standard deviation is not strictly positive.
    """
    std_x = float(std_x)
    std_y = float(std_y)
    if not (std_x > 0.0 and std_y > 0.0):
        raise ValueError(
            f"Standard deviations must be positive, got ({std_x}, {std_y})"
        )

    point = tf.stack([as_float64(x), as_float64(y)], axis=-1)
    mean = tf.stack([as_float64(mu_x), as_float64(mu_y)], axis=-1)

    dist = tfd.MultivariateNormalDiag(
        loc=mean,
        scale_diag=tf.constant([std_x, std_y], dtype=tf.float64),
    )
    return dist.prob(point)

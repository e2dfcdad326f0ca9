"""
Observation likelihood for landmark-based localization.

For every particle, each vehicle-frame observation is moved into the map
frame using the particle's pose, matched to its nearest landmark, and scored
with a bivariate Gaussian centred on that landmark. The particle weight is
the product of these scores over all observations.

All particles are processed together: for N particles, M observations and
L landmarks the pairwise distance tensor has shape (N, M, L).
"""

from __future__ import annotations

from typing import Sequence

import tensorflow as tf

from mcl.errors import EmptyMap, InvalidWeights
from mcl.models.particles import LandmarkMap
from mcl.utils.gaussian import gaussian_2d_pdf
from mcl.utils.geometry import transform_to_map
from mcl.utils.tensors import as_float64


def _as_points(points) -> tf.Tensor:
    return tf.reshape(as_float64(points), [-1, 2])


def nearest_landmark_indices(points: tf.Tensor,
                             positions: tf.Tensor) -> tf.Tensor:
    """
    Index of the nearest landmark for every map-frame point.

    Parameters
    ----------
    points : tf.Tensor
        Map-frame points of shape (..., 2).
    positions : tf.Tensor
        Landmark positions of shape (L, 2), L > 0.

    Returns
    -------
    tf.Tensor
        int32 indices into ``positions`` of shape (...). Among landmarks at
        the same minimal distance the one with the lowest index wins.
    """
    points = as_float64(points)
    positions = as_float64(positions)
    num_landmarks = tf.shape(positions)[0]
    if int(num_landmarks) == 0:
        raise EmptyMap("Cannot associate observations with an empty map")

    diff = tf.expand_dims(points, -2) - positions  # (..., L, 2)
    # Squared distance orders landmarks exactly like the Euclidean distance
    dist_sq = tf.reduce_sum(diff ** 2, axis=-1)  # (..., L)
    min_dist = tf.reduce_min(dist_sq, axis=-1, keepdims=True)

    # tf.argmin does not guarantee which index it returns on ties
    candidate = tf.where(dist_sq <= min_dist,
                         tf.range(num_landmarks),
                         num_landmarks)
    return tf.reduce_min(candidate, axis=-1)


def associate(observation, landmark_map: LandmarkMap) -> int:
    """
    Nearest-landmark data association for a single map-frame observation.

    Parameters
    ----------
    observation : sequence of float or tf.Tensor
        Observation (x, y) already expressed in the map frame.
    landmark_map : LandmarkMap
        Known landmarks.

    Returns
    -------
    int
        Id of the landmark at minimum Euclidean distance. Ties go to the
        landmark that comes first in map order.

    Raises
    ------
    EmptyMap
        If ``landmark_map`` holds no landmarks.
    """
    point = tf.reshape(as_float64(observation), [2])
    index = nearest_landmark_indices(point, landmark_map.positions)
    return int(tf.gather(landmark_map.ids, index))


def compute_weights(poses: tf.Tensor, observations, landmark_map: LandmarkMap,
                    std_landmark: Sequence[float]):
    """
    Recompute particle weights from one batch of observations.

    Parameters
    ----------
    poses : tf.Tensor
        Particle poses [x, y, theta] of shape (N, 3).
    observations : array-like
        Vehicle-frame observations of shape (M, 2). May be empty.
    landmark_map : LandmarkMap
        Known landmarks.
    std_landmark : sequence of float
        Measurement standard deviations [x, y], strictly positive.

    Returns
    -------
    weights : tf.Tensor
        Product of per-observation densities for each particle, shape (N,).
        Exactly 1 for every particle when there are no observations; may
        underflow to 0.
    max_weight : float
        Maximum of ``weights``.
    associated_ids : tf.Tensor
        Landmark id matched to each observation, shape (N, M).
    sense : tf.Tensor
        Map-frame observation coordinates, shape (N, M, 2).

    Raises
    ------
    EmptyMap
        If ``landmark_map`` holds no landmarks.
    ValueError
        If ``std_landmark`` does not have two strictly positive entries.
    InvalidWeights
        If a weight overflows float64. Each density peaks at
        1 / (2 pi std_x std_y), so many observations with tight noise can
        push the product past the largest float64.
    """
    std_landmark = [float(s) for s in std_landmark]
    if len(std_landmark) != 2:
        raise ValueError(f"std_landmark needs 2 entries, got {len(std_landmark)}")
    if min(std_landmark) <= 0.0:
        raise ValueError(f"std_landmark must be positive, got {std_landmark}")
    if landmark_map.is_empty():
        raise EmptyMap("Cannot weight particles against an empty map")

    poses = tf.reshape(as_float64(poses), [-1, 3])
    observations = _as_points(observations)
    num_particles = int(poses.shape[0])

    if int(observations.shape[0]) == 0:
        weights = tf.ones([num_particles], dtype=tf.float64)
        return (weights, 1.0,
                tf.zeros([num_particles, 0], dtype=tf.int32),
                tf.zeros([num_particles, 0, 2], dtype=tf.float64))

    # (N, 1) pose columns against (1, M) observation rows
    map_x, map_y = transform_to_map(
        poses[:, 0:1], poses[:, 1:2], poses[:, 2:3],
        observations[tf.newaxis, :, 0], observations[tf.newaxis, :, 1],
    )
    sense = tf.stack([map_x, map_y], axis=-1)  # (N, M, 2)

    indices = nearest_landmark_indices(sense, landmark_map.positions)  # (N, M)
    matched = tf.gather(landmark_map.positions, indices)  # (N, M, 2)

    densities = gaussian_2d_pdf(
        map_x, map_y, matched[..., 0], matched[..., 1],
        std_landmark[0], std_landmark[1],
    )
    weights = tf.reduce_prod(densities, axis=1)
    if not bool(tf.reduce_all(tf.math.is_finite(weights))):
        raise InvalidWeights(
            f"Weight product overflowed float64 over {int(observations.shape[0])} "
            f"observations with std_landmark={std_landmark}; use fewer observations "
            f"or larger measurement noise"
        )
    max_weight = float(tf.reduce_max(weights))
    associated_ids = tf.gather(landmark_map.ids, indices)

    return weights, max_weight, associated_ids, sense

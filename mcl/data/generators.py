# mcl/data/generators.py
"""
Synthetic localization scenarios: a landmark map, a ground-truth trajectory
driven by constant-rate controls, and noisy vehicle-frame observations of
the landmarks within sensor range at each step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import tensorflow as tf

from mcl.models.motion_model import move
from mcl.models.particles import LandmarkMap
from mcl.utils.config import FilterConfig
from mcl.utils.geometry import transform_to_vehicle
from mcl.utils.logging_config import get_logger
from mcl.utils.tensors import as_float64

logger = get_logger(__name__)


@dataclass
class Scenario:
    """
    A simulated run.

    Attributes
    ----------
    landmark_map : LandmarkMap
        Known landmarks.
    true_poses : tf.Tensor
        Ground-truth poses of shape (T + 1, 3); row 0 is the start pose.
    controls : tf.Tensor
        Controls [v, yaw_rate] of shape (T, 2); control t moves pose t to t + 1.
    observations : list of tf.Tensor
        Vehicle-frame observations for poses 1..T, each of shape (M_t, 2).
    delta_t : float
        Time step (s).
    """
    landmark_map: LandmarkMap
    true_poses: tf.Tensor
    controls: tf.Tensor
    observations: List[tf.Tensor]
    delta_t: float


def generate_landmarks(num_landmarks: int, extent: float = 100.0,
                       seed: Optional[int] = None) -> LandmarkMap:
    """
    Scatter landmarks uniformly over the square [-extent, extent]^2.

    Landmark ids run from 1 to ``num_landmarks``.
    """
    generator = (tf.random.Generator.from_seed(seed) if seed is not None
                 else tf.random.Generator.from_non_deterministic_state())
    positions = generator.uniform([num_landmarks, 2], minval=-extent,
                                  maxval=extent, dtype=tf.float64)
    return LandmarkMap.from_tensor(positions)


def simulate_trajectory(initial_pose: Sequence[float], controls,
                        delta_t: float) -> tf.Tensor:
    """
    Noiseless trajectory under the bicycle model.

    Parameters
    ----------
    initial_pose : sequence of float
        Start pose [x, y, theta].
    controls : array-like
        Controls [v, yaw_rate] of shape (T, 2).
    delta_t : float
        Time step (s).

    Returns
    -------
    tf.Tensor
        Poses of shape (T + 1, 3).
    """
    controls = tf.reshape(as_float64(controls), [-1, 2]).numpy()
    pose = tf.reshape(as_float64(initial_pose), [1, 3])
    poses = [pose]
    for velocity, yaw_rate in controls:
        pose = move(pose, delta_t, velocity, yaw_rate)
        poses.append(pose)
    return tf.concat(poses, axis=0)


def generate_observations(pose: Sequence[float], landmark_map: LandmarkMap,
                          sensor_range: float, std_landmark: Sequence[float],
                          generator: tf.random.Generator) -> tf.Tensor:
    """
    Observe every landmark within ``sensor_range`` of ``pose``.

    Returns
    -------
    tf.Tensor
        Vehicle-frame observations of shape (M, 2) in map order, each
        perturbed by N(0, diag(std_landmark^2)).
    """
    pose = tf.reshape(as_float64(pose), [3])
    positions = landmark_map.positions
    distance = tf.norm(positions - pose[tf.newaxis, :2], axis=1)
    visible = tf.boolean_mask(positions, distance <= sensor_range)

    obs_x, obs_y = transform_to_vehicle(pose[0], pose[1], pose[2],
                                        visible[:, 0], visible[:, 1])
    observations = tf.stack([obs_x, obs_y], axis=1)
    noise = generator.normal(tf.shape(observations), dtype=tf.float64)
    return observations + noise * as_float64(std_landmark)


def generate_scenario(config: FilterConfig, num_steps: int = 50,
                      num_landmarks: int = 30, extent: float = 60.0,
                      initial_pose: Sequence[float] = (0.0, 0.0, 0.0),
                      velocity: float = 5.0, yaw_rate: float = 0.1,
                      seed: Optional[int] = None) -> Scenario:
    """
    Build a complete scenario with constant controls.

    Parameters
    ----------
    config : FilterConfig
        Supplies ``delta_t``, ``sensor_range`` and ``sigma_landmark``.
    num_steps : int
        Number of motion steps T.
    num_landmarks : int
        Number of landmarks in the map.
    extent : float
        Half-width of the square the landmarks are scattered over.
    initial_pose : sequence of float
        Start pose.
    velocity, yaw_rate : float
        Constant control input.
    seed : int, optional
        Seed for landmarks and observation noise.

    Returns
    -------
    Scenario
    """
    landmark_map = generate_landmarks(num_landmarks, extent, seed=seed)
    controls = tf.tile(tf.constant([[velocity, yaw_rate]], dtype=tf.float64),
                       [num_steps, 1])
    true_poses = simulate_trajectory(initial_pose, controls, config.delta_t)

    generator = (tf.random.Generator.from_seed(seed + 1) if seed is not None
                 else tf.random.Generator.from_non_deterministic_state())
    observations = [
        generate_observations(true_poses[t], landmark_map, config.sensor_range,
                              config.sigma_landmark, generator)
        for t in range(1, num_steps + 1)
    ]

    logger.info("Generated scenario: %d steps, %d landmarks", num_steps,
                num_landmarks)
    return Scenario(
        landmark_map=landmark_map,
        true_poses=true_poses,
        controls=controls,
        observations=observations,
        delta_t=config.delta_t,
    )

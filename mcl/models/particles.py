"""
Data model of the localization filter: landmarks and weighted particles.

Particles are stored column-wise as tensors inside ``ParticleSet`` so every
stage of the filter runs over all particles at once. ``Particle`` is a plain
view of one row, used for reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, List, Optional

import tensorflow as tf

from mcl.utils.tensors import as_float64


@dataclass(frozen=True)
class Landmark:
    """A map landmark with a fixed position in the map frame."""
    id: int
    x: float
    y: float


class LandmarkMap:
    """
    Immutable, ordered collection of landmarks.

    Parameters
    ----------
    ids : tf.Tensor
        Landmark identifiers of shape (L,).
    positions : tf.Tensor
        Landmark positions of shape (L, 2) in the map frame.

    Notes
    -----
    Order matters: nearest-landmark ties resolve to the landmark that comes
    first in this order.
    """

    def __init__(self, ids: tf.Tensor, positions: tf.Tensor) -> None:
        ids = tf.reshape(tf.cast(ids, tf.int32), [-1])
        positions = tf.reshape(as_float64(positions), [-1, 2])
        if ids.shape[0] != positions.shape[0]:
            raise ValueError(
                f"Got {ids.shape[0]} landmark ids for {positions.shape[0]} positions"
            )
        self._ids = ids
        self._positions = positions

    @classmethod
    def from_landmarks(cls, landmarks: Iterable[Landmark]) -> "LandmarkMap":
        landmarks = list(landmarks)
        ids = tf.constant([lm.id for lm in landmarks], dtype=tf.int32)
        positions = tf.constant([[lm.x, lm.y] for lm in landmarks],
                                dtype=tf.float64)
        return cls(ids, tf.reshape(positions, [-1, 2]))

    @classmethod
    def from_tensor(cls, positions, ids=None) -> "LandmarkMap":
        """Build a map from an (L, 2) array; ids default to 1..L."""
        positions = tf.reshape(as_float64(positions), [-1, 2])
        if ids is None:
            ids = tf.range(1, tf.shape(positions)[0] + 1, dtype=tf.int32)
        return cls(ids, positions)

    @property
    def ids(self) -> tf.Tensor:
        return self._ids

    @property
    def positions(self) -> tf.Tensor:
        return self._positions

    def is_empty(self) -> bool:
        return len(self) == 0

    def __len__(self) -> int:
        return int(self._ids.shape[0])

    def __getitem__(self, index: int) -> Landmark:
        x, y = self._positions[index].numpy().tolist()
        return Landmark(id=int(self._ids[index]), x=x, y=y)

    def __iter__(self) -> Iterator[Landmark]:
        for i in range(len(self)):
            yield self[i]


@dataclass
class Particle:
    """
    A single weighted pose hypothesis.

    ``associations``, ``sense_x`` and ``sense_y`` hold the landmark ids and
    map-frame observation coordinates the particle was last matched with.
    They are for reporting only and never feed back into the filter.
    """
    id: int
    x: float
    y: float
    theta: float
    weight: float
    associations: List[int] = field(default_factory=list)
    sense_x: List[float] = field(default_factory=list)
    sense_y: List[float] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class ParticleSet:
    """
    Fixed-size set of particles.

    Attributes
    ----------
    ids : tf.Tensor
        Particle identifiers of shape (N,), int32.
    poses : tf.Tensor
        Poses [x, y, theta] of shape (N, 3), float64.
    weights : tf.Tensor
        Non-negative, unnormalized weights of shape (N,), float64.
    max_weight : float
        Maximum of ``weights``. Always computed together with ``weights``.
    associations : tf.Tensor
        Associated landmark ids of shape (N, M), int32.
    sense : tf.Tensor
        Map-frame observation coordinates of shape (N, M, 2), float64.
    """

    ids: tf.Tensor
    poses: tf.Tensor
    weights: tf.Tensor
    max_weight: float
    associations: tf.Tensor
    sense: tf.Tensor

    @staticmethod
    def create(poses: tf.Tensor, weights: Optional[tf.Tensor] = None,
               ids: Optional[tf.Tensor] = None) -> "ParticleSet":
        """Build a set with empty association metadata."""
        poses = tf.reshape(as_float64(poses), [-1, 3])
        n = int(poses.shape[0])
        if ids is None:
            ids = tf.range(n, dtype=tf.int32)
        if weights is None:
            weights = tf.ones([n], dtype=tf.float64)
        weights = as_float64(weights)
        return ParticleSet(
            ids=tf.cast(ids, tf.int32),
            poses=poses,
            weights=weights,
            max_weight=float(tf.reduce_max(weights)) if n > 0 else 0.0,
            associations=tf.zeros([n, 0], dtype=tf.int32),
            sense=tf.zeros([n, 0, 2], dtype=tf.float64),
        )

    def with_poses(self, poses: tf.Tensor) -> "ParticleSet":
        return replace(self, poses=as_float64(poses))

    def with_weights(self, weights: tf.Tensor,
                     associations: Optional[tf.Tensor] = None,
                     sense: Optional[tf.Tensor] = None) -> "ParticleSet":
        """
        Install a new weight vector and its maximum in one step, optionally
        with the association metadata produced alongside it.
        """
        weights = as_float64(weights)
        changes = dict(weights=weights, max_weight=float(tf.reduce_max(weights)))
        if associations is not None:
            changes["associations"] = tf.cast(associations, tf.int32)
        if sense is not None:
            changes["sense"] = as_float64(sense)
        return replace(self, **changes)

    def gather(self, indices: tf.Tensor) -> "ParticleSet":
        """Copy the particles at ``indices`` (with replacement) into a new set."""
        weights = tf.gather(self.weights, indices)
        return ParticleSet(
            ids=tf.gather(self.ids, indices),
            poses=tf.gather(self.poses, indices),
            weights=weights,
            max_weight=float(tf.reduce_max(weights)),
            associations=tf.gather(self.associations, indices),
            sense=tf.gather(self.sense, indices),
        )

    def __len__(self) -> int:
        return int(self.poses.shape[0])

    def __getitem__(self, index: int) -> Particle:
        x, y, theta = self.poses[index].numpy().tolist()
        sense = self.sense[index].numpy()
        return Particle(
            id=int(self.ids[index]),
            x=x,
            y=y,
            theta=theta,
            weight=float(self.weights[index]),
            associations=self.associations[index].numpy().tolist(),
            sense_x=sense[:, 0].tolist(),
            sense_y=sense[:, 1].tolist(),
        )

    def __iter__(self) -> Iterator[Particle]:
        for i in range(len(self)):
            yield self[i]

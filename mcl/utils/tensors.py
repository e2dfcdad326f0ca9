"""
Tensor conversion helpers.
"""

from __future__ import annotations

import tensorflow as tf


def as_float64(value) -> tf.Tensor:
    """
    Convert ``value`` to a float64 tensor.

    Python floats and lists are converted directly in float64; existing
    tensors and arrays of another dtype are cast.
    """
    return tf.cast(tf.convert_to_tensor(value, dtype_hint=tf.float64), tf.float64)

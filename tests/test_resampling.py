"""
Unit tests for resampling algorithms.
"""

import unittest
import tensorflow as tf
import tensorflow_probability as tfp
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mcl.errors import DegenerateWeights, InvalidParticleCount, InvalidWeights
from mcl.filters.resampling import resample_particles, uniform_resample, wheel_resample
from mcl.models.particles import ParticleSet


class TestWheelResample(unittest.TestCase):
    """Test cases for the resampling wheel."""

    def setUp(self):
        """Set up test fixtures."""
        tf.random.set_seed(42)
        self.generator = tf.random.Generator.from_seed(42)

    def test_output_shape(self):
        """Test that output shape matches input."""
        weights = tf.constant([0.1, 0.2, 0.3, 0.4], dtype=tf.float64)
        indices = wheel_resample(weights, generator=self.generator)

        self.assertEqual(indices.shape, (4,))
        self.assertEqual(indices.dtype, tf.int32)

    def test_valid_indices(self):
        """Test that all indices are valid."""
        weights = tf.random.uniform([50], dtype=tf.float64)
        indices = wheel_resample(weights, generator=self.generator)

        self.assertTrue(tf.reduce_all(indices >= 0))
        self.assertTrue(tf.reduce_all(indices < 50))

    def test_high_weight_particle_selected(self):
        """Test that high weight particles are preferentially selected."""
        weights = tf.constant([0.01, 0.01, 0.01, 0.97], dtype=tf.float64)
        indices = wheel_resample(weights, generator=self.generator)

        count_3 = tf.reduce_sum(tf.cast(indices == 3, tf.int32))
        self.assertGreater(int(count_3), 2)

    def test_zero_weight_never_selected(self):
        """Particles with zero weight are never copied."""
        weights = tf.constant([0.0, 1.0, 0.0, 2.0, 0.0, 0.5], dtype=tf.float64)
        for _ in range(20):
            indices = wheel_resample(weights, generator=self.generator).numpy()
            self.assertFalse(any(i in (0, 2, 4) for i in indices))

    def test_single_particle(self):
        """A single particle is always selected."""
        indices = wheel_resample(tf.constant([0.3], tf.float64), generator=self.generator)
        tf.debugging.assert_equal(indices, tf.constant([0], tf.int32))

    def test_unnormalized_weights(self):
        """Test that unnormalized, tiny weights are handled."""
        weights = tf.constant([1e-60, 2e-60, 3e-60, 4e-60], dtype=tf.float64)
        indices = wheel_resample(weights, generator=self.generator)

        self.assertEqual(indices.shape, (4,))
        self.assertTrue(tf.reduce_all(indices >= 0))
        self.assertTrue(tf.reduce_all(indices < 4))

    def test_proportionality_chi_squared(self):
        """Selection frequencies match the weights (chi-squared goodness of fit)."""
        weights = tf.constant([1.0, 2.0, 3.0, 4.0], dtype=tf.float64)
        probs = (weights / tf.reduce_sum(weights)).numpy()
        n_trials = 2000

        # One draw per trial keeps the samples independent
        counts = [0, 0, 0, 0]
        all_counts = [0, 0, 0, 0]
        for _ in range(n_trials):
            indices = wheel_resample(weights, generator=self.generator).numpy()
            counts[indices[-1]] += 1
            for i in indices:
                all_counts[i] += 1

        expected = probs * n_trials
        chi2 = sum((c - e) ** 2 / e for c, e in zip(counts, expected))
        p_value = float(tfp.distributions.Chi2(
            tf.constant(3.0, tf.float64)).survival_function(chi2))
        self.assertGreater(p_value, 1e-3)

        total = float(sum(all_counts))
        for count, p in zip(all_counts, probs):
            self.assertAlmostEqual(count / total, p, delta=0.04)

    def test_all_zero_weights(self):
        """All-zero weights cannot drive the wheel."""
        with self.assertRaises(DegenerateWeights):
            wheel_resample(tf.zeros([5], tf.float64), generator=self.generator)

    def test_stale_max_weight(self):
        """A max weight that does not match the weights is rejected."""
        weights = tf.constant([0.1, 0.2, 0.3], dtype=tf.float64)
        with self.assertRaises(InvalidWeights):
            wheel_resample(weights, max_weight=0.9, generator=self.generator)

        indices = wheel_resample(weights, max_weight=0.3, generator=self.generator)
        self.assertEqual(indices.shape, (3,))

    def test_invalid_weights(self):
        """Negative or non-finite weights are rejected."""
        with self.assertRaises(InvalidWeights):
            wheel_resample(tf.constant([0.5, -0.1], tf.float64), generator=self.generator)
        with self.assertRaises(InvalidWeights):
            wheel_resample(tf.constant([0.5, float('nan')], tf.float64),
                           generator=self.generator)
        with self.assertRaises(InvalidParticleCount):
            wheel_resample(tf.zeros([0], tf.float64), generator=self.generator)

    def test_reproducible_with_seed(self):
        """The same seed gives the same draw."""
        weights = tf.constant([0.5, 0.1, 0.9, 0.3, 0.7], dtype=tf.float64)
        first = wheel_resample(weights, generator=tf.random.Generator.from_seed(7))
        second = wheel_resample(weights, generator=tf.random.Generator.from_seed(7))
        tf.debugging.assert_equal(first, second)


class TestUniformResample(unittest.TestCase):
    """Test cases for uniform resampling."""

    def test_output(self):
        """Indices cover [0, N) with the right shape."""
        generator = tf.random.Generator.from_seed(0)
        indices = uniform_resample(200, generator=generator)

        self.assertEqual(indices.shape, (200,))
        self.assertTrue(tf.reduce_all(indices >= 0))
        self.assertTrue(tf.reduce_all(indices < 200))
        # With 200 draws over 200 slots, many distinct particles survive
        self.assertGreater(len(set(indices.numpy().tolist())), 100)

    def test_invalid_count(self):
        """The number of particles must be positive."""
        with self.assertRaises(InvalidParticleCount):
            uniform_resample(0)


class TestResampleParticles(unittest.TestCase):
    """Test cases for resampling a whole particle set."""

    def setUp(self):
        """Set up test fixtures."""
        self.generator = tf.random.Generator.from_seed(3)
        poses = tf.reshape(tf.range(30, dtype=tf.float64), [10, 3])
        self.particle_set = ParticleSet.create(poses)

    def test_copies_selected_particles(self):
        """Resampled particles are copies of the selected ones."""
        weights = tf.constant([0.0] * 9 + [1.0], tf.float64)
        particle_set = self.particle_set.with_weights(weights)

        resampled = resample_particles(particle_set, generator=self.generator)

        self.assertEqual(len(resampled), 10)
        tf.debugging.assert_equal(resampled.ids, tf.fill([10], 9))
        tf.debugging.assert_equal(resampled.poses,
                                  tf.tile(particle_set.poses[9:10], [10, 1]))
        self.assertEqual(resampled.max_weight, 1.0)

    def test_degenerate_fallback(self):
        """All-zero weights fall back to uniform resampling with a warning."""
        particle_set = self.particle_set.with_weights(tf.zeros([10], tf.float64))

        with self.assertLogs('mcl.filters.resampling', level='WARNING'):
            resampled = resample_particles(particle_set, generator=self.generator)

        self.assertEqual(len(resampled), 10)
        self.assertTrue(tf.reduce_all(resampled.ids >= 0))
        self.assertTrue(tf.reduce_all(resampled.ids < 10))


if __name__ == '__main__':
    unittest.main()

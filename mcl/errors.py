"""
Exceptions raised by the localization filter.

Every failure the filter surfaces derives from ``ParticleFilterError`` so a
driver loop can tell filter faults apart from its own I/O errors.
"""


class ParticleFilterError(Exception):
    """Base class for localization filter errors."""


class NotInitialized(ParticleFilterError):
    """A filter stage was invoked before ``initialize``."""


class AlreadyInitialized(ParticleFilterError):
    """``initialize`` was called on a filter that already holds particles."""


class EmptyMap(ParticleFilterError):
    """Data association was attempted against a map with no landmarks."""


class InvalidParticleCount(ParticleFilterError, ValueError):
    """The requested number of particles is not a positive integer."""


class InvalidWeights(ParticleFilterError, ValueError):
    """Weights are negative, non-finite, or disagree with the given maximum."""


class DegenerateWeights(ParticleFilterError):
    """
    Every particle weight is zero, so the resampling wheel cannot turn.

    Handled inside resampling by falling back to uniform index sampling.
    """


class StaleWeights(InvalidWeights):
    """
    Resampling was requested without a weighting pass since the particles
    last changed (after ``initialize``, ``predict`` or a previous
    ``resample``).
    """

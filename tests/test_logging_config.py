"""
Unit tests for logging configuration.
"""

import logging
import unittest
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mcl.utils.logging_config import get_logger, set_level, setup_logging


class TestLoggingConfig(unittest.TestCase):
    """Test cases for the logging helpers."""

    def setUp(self):
        """Set up test fixtures."""
        self.root = logging.getLogger()
        self.saved_level = self.root.level

    def tearDown(self):
        """Restore the root level."""
        set_level(logging.getLevelName(self.saved_level))

    def test_get_logger_is_named_and_configured(self):
        """Loggers are named after their module and the root has handlers."""
        logger = get_logger("mcl.filters.particle_filter")
        self.assertEqual(logger.name, "mcl.filters.particle_filter")
        self.assertTrue(self.root.handlers)

    def test_setup_logging_runs_once(self):
        """A second setup call leaves the installed handlers alone."""
        get_logger(__name__)
        handlers = list(self.root.handlers)
        setup_logging(level="DEBUG")
        self.assertEqual(self.root.handlers, handlers)

    def test_set_level(self):
        """set_level changes the root logger and its handlers."""
        get_logger(__name__)
        set_level("DEBUG")
        self.assertEqual(self.root.level, logging.DEBUG)
        for handler in self.root.handlers:
            self.assertEqual(handler.level, logging.DEBUG)

        set_level("WARNING")
        self.assertEqual(self.root.level, logging.WARNING)


if __name__ == '__main__':
    unittest.main()

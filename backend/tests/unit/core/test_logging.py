"""
Unit tests for the logging helper.

WHAT: Tests for configure_logging.

WHY: Verifies that:
1. The requested level and shared format reach logging.basicConfig
2. The level falls back to settings, then to INFO for unknown names
3. SQLAlchemy engine logging is kept at WARNING

HOW: Replaces logging.basicConfig with a MagicMock through monkeypatch.
"""

import logging
from unittest.mock import MagicMock

import pytest

from orgkit.core import logging as orgkit_logging
from orgkit.core.logging import LOG_FORMAT, configure_logging


@pytest.fixture
def basic_config(monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr(orgkit_logging.logging, "basicConfig", mock)
    return mock


class TestConfigureLogging:
    """Tests for log level selection."""

    def test_uses_given_level(self, basic_config):
        """Test configuring logging with an explicit level name."""
        configure_logging("debug")

        basic_config.assert_called_once_with(level=logging.DEBUG, format=LOG_FORMAT)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_defaults_to_settings(self, basic_config, monkeypatch):
        """Test that the level comes from settings when none is given."""
        monkeypatch.setattr(orgkit_logging.settings, "LOG_LEVEL", "ERROR")

        configure_logging()

        basic_config.assert_called_once_with(level=logging.ERROR, format=LOG_FORMAT)

    def test_unknown_level_falls_back_to_info(self, basic_config):
        """Test that an unknown level name is treated as INFO."""
        configure_logging("chatty")

        assert basic_config.call_args.kwargs["level"] == logging.INFO

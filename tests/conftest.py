"""
Basic test fixtures for the jute test suite.

Provides fresh sessions, controllers and collaborators per test.
"""

import sys
import os
import pytest

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from jute.app.controller import InputController
from jute.app.log_manager import LogManager
from jute.core.input_system import KeyConfigLoader
from jute.core.session import SessionState


@pytest.fixture
def session():
    """Create a fresh session in its initial state."""
    return SessionState()


@pytest.fixture
def log_manager():
    """Create an empty log manager."""
    return LogManager()


@pytest.fixture
def controller(log_manager):
    """Create a controller with the default (reject empty) policy."""
    return InputController(log_manager=log_manager)


@pytest.fixture
def permissive_controller():
    """Create a controller that allows exporting an empty collection."""
    return InputController(allow_empty=True)


@pytest.fixture
def key_config(log_manager):
    """Load the bundled key bindings."""
    loader = KeyConfigLoader(log_manager=log_manager)
    assert loader.load_config()
    return loader

"""
Shared test fixtures and configuration for pytest.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from docsearch.core.config import EngineConfig  # noqa: E402
from docsearch.retrieval.engine import RetrievalEngine  # noqa: E402


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def engine() -> RetrievalEngine:
    """Initialized engine with default configuration."""
    eng = RetrievalEngine()
    eng.initialize()
    return eng


@pytest.fixture
def replacing_engine() -> RetrievalEngine:
    """Initialized engine that replaces a document's chunks on re-upload."""
    eng = RetrievalEngine(EngineConfig(replace_on_reupload=True))
    eng.initialize()
    return eng


@pytest.fixture
def clean_docsearch_logger():
    """Remove handlers added to the package logger during a test."""
    package_logger = logging.getLogger("docsearch")
    saved_handlers = list(package_logger.handlers)
    saved_level = package_logger.level
    package_logger.handlers = []

    yield package_logger

    package_logger.handlers = saved_handlers
    package_logger.setLevel(saved_level)

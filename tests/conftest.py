"""
Shared pytest fixtures and configuration for the codeshare client test suite.

This module provides:
- Hypothesis configuration for property-based testing
- Fake transfer gateway and file saver fixtures
- Session fixtures wired to a recording event publisher
"""

import logging

import pytest

# Hypothesis configuration
from hypothesis import settings, HealthCheck, Phase

from codeshare.application.retrieval_session import RetrievalSession
from codeshare.application.upload_session import UploadSession
from codeshare.config.logging_config import LOGGER_NAME

from tests.fixtures import FakeTransferGateway, RecordingEventPublisher, RecordingFileSaver

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("default")


# =============================================================================
# Transfer Boundary Fixtures
# =============================================================================

@pytest.fixture
def gateway() -> FakeTransferGateway:
    """Provide a scripted transfer gateway."""
    return FakeTransferGateway()


@pytest.fixture
def file_saver() -> RecordingFileSaver:
    """Provide an in-memory file saver."""
    return RecordingFileSaver()


@pytest.fixture
def publisher() -> RecordingEventPublisher:
    """Provide an event publisher that records published events."""
    return RecordingEventPublisher()


# =============================================================================
# Session Fixtures
# =============================================================================

@pytest.fixture
def upload_session(gateway, publisher) -> UploadSession:
    return UploadSession(gateway=gateway, event_publisher=publisher, session_id="upload-1")


@pytest.fixture
def retrieval_session(gateway, file_saver, publisher) -> RetrievalSession:
    return RetrievalSession(
        gateway=gateway,
        file_saver=file_saver,
        event_publisher=publisher,
        session_id="retrieval-1",
    )


@pytest.fixture
def restore_package_logger():
    """Undo handler changes made by configure_logging()."""
    package_logger = logging.getLogger(LOGGER_NAME)
    handlers = package_logger.handlers[:]
    level = package_logger.level
    propagate = package_logger.propagate
    yield package_logger
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)

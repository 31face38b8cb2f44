"""
Test fixtures package.

Provides factory functions and fake transfer-boundary implementations for testing.
"""

from .domain_fixtures import (
    DEFAULT_CODE,
    DEFAULT_TOKEN,
    create_candidate,
    create_metadata,
    create_metadata_dict,
    create_payload,
    create_receipt,
)
from .recording_publisher import RecordingEventPublisher
from .fake_transfer import (
    FakeTransferGateway,
    InMemoryStagedFile,
    RecordingFileSaver,
)

__all__ = [
    "DEFAULT_CODE",
    "DEFAULT_TOKEN",
    "create_candidate",
    "create_metadata",
    "create_metadata_dict",
    "create_payload",
    "create_receipt",
    "FakeTransferGateway",
    "InMemoryStagedFile",
    "RecordingEventPublisher",
    "RecordingFileSaver",
]

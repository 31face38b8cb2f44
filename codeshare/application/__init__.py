"""
Application Services Layer

Session state machines and the services that wire them together.
"""

from .event_publisher import EventPublisher
from .retrieval_session import RetrievalSession
from .upload_session import UploadSession

__all__ = [
    'EventPublisher',
    'RetrievalSession',
    'UploadSession',
]

"""
Session Domain

State snapshots for the upload and retrieval state machines.
"""

from .value_objects import (
    OperationResult,
    RetrievalPhase,
    RetrievalState,
    UploadPhase,
    UploadState,
)

__all__ = [
    'OperationResult',
    'RetrievalPhase',
    'RetrievalState',
    'UploadPhase',
    'UploadState',
]

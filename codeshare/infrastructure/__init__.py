"""
Infrastructure Layer

Concrete implementations of the transfer boundary: the httpx gateway, the
local file saver and event handlers.
"""

from .http_transfer_gateway import HttpTransferGateway
from .local_file_saver import LocalFileSaver

__all__ = [
    "HttpTransferGateway",
    "LocalFileSaver",
]

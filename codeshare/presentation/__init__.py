"""
Presentation Layer

Renderers and display helpers driven by session state. Nothing in the core
imports from here.
"""

from .console_renderer import ConsoleRenderer
from .formatting import file_icon, format_file_size, format_timestamp

__all__ = [
    "ConsoleRenderer",
    "file_icon",
    "format_file_size",
    "format_timestamp",
]

"""
Display formatting helpers used by renderers.
"""

from datetime import datetime
from typing import Optional

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]

DEFAULT_ICON = "📄"

FILE_ICONS = {
    # Images
    "jpg": "🖼️",
    "jpeg": "🖼️",
    "png": "🖼️",
    "gif": "🖼️",
    "bmp": "🖼️",
    "svg": "🖼️",
    "webp": "🖼️",
    # Documents
    "pdf": "📕",
    "doc": "📄",
    "docx": "📄",
    "txt": "📝",
    "rtf": "📄",
    # Spreadsheets and presentations
    "xls": "📊",
    "xlsx": "📊",
    "csv": "📊",
    "ppt": "📊",
    "pptx": "📊",
    # Archives
    "zip": "📦",
    "rar": "📦",
    "7z": "📦",
    "tar": "📦",
    "gz": "📦",
    # Audio
    "mp3": "🎵",
    "wav": "🎵",
    "flac": "🎵",
    "aac": "🎵",
    "ogg": "🎵",
    # Video
    "mp4": "🎬",
    "avi": "🎬",
    "mkv": "🎬",
    "mov": "🎬",
    "wmv": "🎬",
    "flv": "🎬",
    # Code
    "js": "💻",
    "html": "💻",
    "css": "💻",
    "py": "💻",
    "java": "💻",
    "cpp": "💻",
    "c": "💻",
    # Executables
    "exe": "⚙️",
    "msi": "⚙️",
}


def format_file_size(size: int) -> str:
    """
    Human-readable size in base-1024 units.

    Examples:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size <= 0:
        return "0 Bytes"

    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1

    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {_SIZE_UNITS[unit]}"


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp in local time."""
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def file_icon(filename: Optional[str]) -> str:
    """Icon for a filename, chosen by its extension."""
    if not filename or "." not in filename:
        return DEFAULT_ICON
    extension = filename.rsplit(".", 1)[-1].lower()
    return FILE_ICONS.get(extension, DEFAULT_ICON)

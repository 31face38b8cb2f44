"""
Content-Disposition filename resolution.
"""

import re
from typing import Optional
from urllib.parse import unquote

DEFAULT_DOWNLOAD_FILENAME = "downloaded_file"

_FILENAME_PATTERN = re.compile(r"""filename[^;=\n]*=((['"]).*?\2|[^;\n]*)""", re.IGNORECASE)
_QUOTES = re.compile(r"""["']""")
# RFC 5987 extended value: charset'language'percent-encoded-value
_EXTENDED_VALUE = re.compile(r"^([\w!#$%&+^`{}~-]+)'[^']*'(.*)$")


def filename_from_content_disposition(header: Optional[str]) -> Optional[str]:
    """
    Extract the filename from a Content-Disposition header value.

    Returns None when the header is absent or carries no usable filename.
    """
    if not header:
        return None

    match = _FILENAME_PATTERN.search(header)
    if not match or not match.group(1):
        return None

    raw = match.group(1).strip()
    extended = _EXTENDED_VALUE.match(raw)
    if extended:
        charset, encoded = extended.groups()
        try:
            raw = unquote(encoded, encoding=charset, errors="strict")
        except (LookupError, UnicodeDecodeError):
            raw = encoded

    filename = _QUOTES.sub("", raw).strip()
    return filename or None


def resolve_download_filename(header: Optional[str], fallback: Optional[str]) -> str:
    """Header filename first, then the metadata filename, then a fixed default."""
    return filename_from_content_disposition(header) or fallback or DEFAULT_DOWNLOAD_FILENAME

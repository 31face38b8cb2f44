"""
Codeshare client.

Upload a file to a share server to receive an 8-character code, or inspect
and download the file behind a code.
"""

__version__ = "1.0.0"

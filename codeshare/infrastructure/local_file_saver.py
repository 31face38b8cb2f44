"""
Local File Saver

IFileSaver implementation writing received files into a download
directory. Bytes are first staged in a hidden temporary file next to the
destination, then moved into place under a safe, non-clashing name.
"""

import logging
import os
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from codeshare.domain.transfer import DEFAULT_DOWNLOAD_FILENAME, IFileSaver, StagedFile

logger = logging.getLogger(__name__)

_UNSAFE_CHARACTERS = re.compile(r'[\x00-\x1f<>:"|?*]')


class TemporaryStagedFile(StagedFile):
    """Staged bytes held in a temporary file until saved or released."""

    def __init__(self, path: Path, size: int):
        self.path = path
        self._size = size
        self._released = False

    @property
    def size(self) -> int:
        return self._size

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Remove the temporary file if it was not moved into place. Idempotent."""
        if self._released:
            return
        self._released = True
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


def safe_filename(suggested: str) -> str:
    """
    Reduce a server-suggested filename to a bare, portable basename.

    Directory components are dropped on both separators and characters
    that are invalid on common filesystems are replaced.
    """
    name = (suggested or "").replace("\\", "/").split("/")[-1]
    name = _UNSAFE_CHARACTERS.sub("_", name).strip().strip(".")
    return name or DEFAULT_DOWNLOAD_FILENAME


class LocalFileSaver(IFileSaver):
    """Saves downloads into a local directory without overwriting."""

    def __init__(self, download_dir: Union[str, Path]):
        self.download_dir = Path(download_dir)

    @contextmanager
    def stage(self, content: bytes) -> Iterator[TemporaryStagedFile]:
        self.download_dir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=".codeshare-", suffix=".part", dir=self.download_dir)
        staged = TemporaryStagedFile(Path(name), len(content))
        try:
            with os.fdopen(fd, "wb") as fileobj:
                fileobj.write(content)
            yield staged
        finally:
            staged.release()

    def save(self, staged: StagedFile, suggested_filename: str) -> Path:
        if not isinstance(staged, TemporaryStagedFile):
            raise TypeError(f"Unsupported staged file: {type(staged).__name__}")
        if staged.released:
            raise ValueError("Staged file has already been released")

        target = self._claim_target(safe_filename(suggested_filename))
        try:
            os.replace(staged.path, target)
        except OSError:
            target.unlink()
            raise
        logger.info(f"Saved {staged.size} bytes to {target}")
        return target

    def _claim_target(self, filename: str) -> Path:
        """Create an empty placeholder under the first free name and return it."""
        stem, suffix = os.path.splitext(filename)
        counter = 0
        while True:
            name = filename if counter == 0 else f"{stem} ({counter}){suffix}"
            candidate = self.download_dir / name
            try:
                fd = os.open(candidate, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            except FileExistsError:
                counter += 1
                continue
            os.close(fd)
            return candidate

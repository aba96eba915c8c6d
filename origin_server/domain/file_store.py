"""Filesystem access rooted at the configured files directory."""

import errno
import os
from pathlib import Path

DEFAULT_FILE_MODE = 0o600


class FileStore:
    """Reads and writes files that are direct children of ``root``."""

    def __init__(self, root: str, file_mode: int = DEFAULT_FILE_MODE) -> None:
        self.root = root
        self.file_mode = file_mode

    def resolve(self, name: str) -> Path:
        """Return the path for ``name`` or raise FileNotFoundError.

        Only plain names are stored: an unset root, an empty name or a name
        containing a path separator never maps to a file.
        """
        if not self.root:
            raise FileNotFoundError(errno.ENOENT, "No files directory configured", name)
        if name in ("", ".", "..") or "/" in name or "\\" in name or "\x00" in name:
            raise FileNotFoundError(errno.ENOENT, "Not a plain file name", name)
        return Path(self.root) / name

    def read(self, name: str) -> bytes:
        """Return the bytes of the stored file."""
        return self.resolve(name).read_bytes()

    def write(self, name: str, data: bytes) -> Path:
        """Create or truncate the stored file with ``data``."""
        target = self.resolve(name)
        descriptor = os.open(
            target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.file_mode
        )
        with os.fdopen(descriptor, "wb") as file_handle:
            file_handle.write(data)
        return target

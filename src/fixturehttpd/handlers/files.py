"""
=============================================================================
FILE LOADER
=============================================================================

Reads served files into memory, one request at a time.

=============================================================================
NO CACHE
=============================================================================

Every request reads the file again from disk:

    Request 1 ──► read_bytes() ──► response ──► buffer dropped
    Request 2 ──► read_bytes() ──► response ──► buffer dropped

Test harnesses rewrite fixture files between runs; a cache would hand the
client stale bytes.

=============================================================================
FAILURE CLASSES
=============================================================================

    FileNotFound     No such file (or a path component is not a
                     directory, or the path escapes the root)   →  404
    FileUnreadable   Too large, a directory, no permission,
                     or an I/O error while reading              →  503

=============================================================================
PATHS LIKE "relative/../test_file"
=============================================================================

A client that does not normalize relative redirects will ask for
"/relative/../test_file". We open that path as given, so the OS resolves
it, which only works when the "relative" directory exists. That is the
point: it tells the harness whether the client resolved the Location or
passed it through. See prepare_fixture_dirs().

The root check below uses the resolved path, so ".." can move around
inside the root but never out of it.

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Union


logger = logging.getLogger(__name__)


class FileLoadError(Exception):
    """Base class for failures loading a served file."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class FileNotFound(FileLoadError):
    """The requested file does not exist under the serve root."""


class FileUnreadable(FileLoadError):
    """The file exists but is too large or cannot be read."""


class FileLoader:
    """
    Loads whole files from below a root directory.

    Usage:
        loader = FileLoader("/srv/fixtures", max_file_size=8_000_000)
        data = loader.load("test_file")
    """

    def __init__(self, root_dir: Union[str, Path] = ".", max_file_size: int = 8_000_000):
        """
        Args:
            root_dir: Directory request paths are relative to.
            max_file_size: Files larger than this are refused (FileUnreadable).
        """
        self.root_dir = Path(root_dir)
        self.max_file_size = max_file_size

    def load(self, relative_path: str) -> bytes:
        """
        Read a file fully into memory.

        Args:
            relative_path: Path below root_dir, without a leading "/".

        Returns:
            The file's bytes.

        Raises:
            FileNotFound: Missing file, or path outside root_dir.
            FileUnreadable: Too large, not a regular file, or unreadable.
        """
        full_path = self.root_dir / relative_path

        # resolve() collapses ".." so we can compare against the root
        root = self.root_dir.resolve()
        try:
            full_path.resolve().relative_to(root)
        except ValueError:
            logger.warning(f"Refusing path outside serve root: {relative_path}")
            raise FileNotFound(f"Outside serve root: {relative_path}", relative_path)

        try:
            size = full_path.stat().st_size
            if full_path.is_dir():
                raise FileUnreadable(f"Is a directory: {relative_path}", relative_path)
            if size > self.max_file_size:
                raise FileUnreadable(
                    f"File too large: {relative_path} ({size} > {self.max_file_size} bytes)",
                    relative_path,
                )
            return full_path.read_bytes()
        except (FileNotFoundError, NotADirectoryError) as e:
            raise FileNotFound(f"No such file: {relative_path}", relative_path) from e
        except OSError as e:
            raise FileUnreadable(f"Cannot read {relative_path}: {e}", relative_path) from e


def prepare_fixture_dirs(
    root_dir: Union[str, Path] = ".",
    dirs: Iterable[str] = ("relative",),
) -> None:
    """
    Create the directories the redirect fixtures rely on.

    The relative redirect ("/relative/redirect" → "../test_file") can only
    be followed literally if "relative" exists under the serve root. Call
    this before starting the server.
    """
    for name in dirs:
        os.makedirs(Path(root_dir) / name, exist_ok=True)

"""
=============================================================================
HANDLERS MODULE
=============================================================================

Content sources for the router. The fixture server only serves files, so
this is the file loader and the helper that prepares the serve root.

=============================================================================
"""

from .files import (
    FileLoader,
    FileLoadError,
    FileNotFound,
    FileUnreadable,
    prepare_fixture_dirs,
)

__all__ = [
    "FileLoader",
    "FileLoadError",
    "FileNotFound",
    "FileUnreadable",
    "prepare_fixture_dirs",
]

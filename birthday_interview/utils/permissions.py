"""Capability checking utilities."""

import os
from pathlib import Path
from typing import Union

from ..errors import CapabilityUnavailableError


def check_zip_available() -> bool:
    """Deflate compression needs the zlib extension module."""
    try:
        import zlib  # noqa: F401
    except ImportError:
        return False
    return True


def check_path_writable(path: str) -> bool:
    """Check if a destination path is writable."""
    p = Path(path)
    if p.exists():
        return os.access(str(p), os.W_OK)
    # Check parent
    parent = p.parent
    while not parent.exists():
        parent = parent.parent
    return os.access(str(parent), os.W_OK)


def require_capabilities(*paths: Union[str, Path], need_zip: bool = False) -> None:
    """Refuse to run when a required directory or codec is unavailable."""
    if need_zip and not check_zip_available():
        raise CapabilityUnavailableError("Zip compression is not available on this platform")
    for path in paths:
        if not check_path_writable(str(path)):
            raise CapabilityUnavailableError(f"Storage location is not writable: {path}")

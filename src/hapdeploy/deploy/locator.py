"""ArtifactLocator - find the installable package in an extracted tree."""

from pathlib import Path
from typing import Optional, Union

PACKAGE_EXTENSION = '.hap'


def is_package(path: Union[str, Path]) -> bool:
    """True if ``path`` has the installable package extension (case-insensitive)."""
    return Path(path).suffix.lower() == PACKAGE_EXTENSION


def locate_package(root: Union[str, Path]) -> Optional[Path]:
    """Return the first package file under ``root``, or None.

    Files are ordered lexically by their path components relative to
    ``root``, so the answer does not depend on filesystem listing order.
    None means "nothing to install"; it is not an error.
    """
    root = Path(root)
    if not root.is_dir():
        return None

    candidates = sorted(
        (path for path in root.rglob('*') if path.is_file() and is_package(path)),
        key=lambda path: path.relative_to(root).parts
    )
    return candidates[0] if candidates else None

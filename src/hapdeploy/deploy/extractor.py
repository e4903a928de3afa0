"""
ArchiveExtractor - expand a cached archive next to itself, once.

``bundle.zip`` expands into the sibling directory ``bundle/``. An existing
extraction root is always reused as-is: it is never re-extracted or merged.
"""

import shutil
import zipfile
import zlib
from pathlib import Path
from typing import List, Optional, Tuple, Union

from hapdeploy.core.protocols import Logger
from hapdeploy.deploy.base import ExtractionJob
from hapdeploy.deploy.exceptions import ExtractionError, PathTraversalError
from hapdeploy.deploy.transcript import Transcript

ARCHIVE_EXTENSION = '.zip'
COPY_CHUNK_SIZE = 1024 * 1024


def is_archive(path: Union[str, Path]) -> bool:
    """True if ``path`` has the archive extension (case-insensitive)."""
    return Path(path).suffix.lower() == ARCHIVE_EXTENSION


def resolve_entry_destination(extraction_root: Path, entry_name: str) -> Path:
    """
    Map an archive entry name to its path under ``extraction_root``.

    Raises:
        PathTraversalError: If the resolved path is outside the root
            (``../`` components, absolute names, symlinked parents)
    """
    root = extraction_root.resolve()
    destination = (root / entry_name).resolve()
    if destination != root and not destination.is_relative_to(root):
        raise PathTraversalError(entry_name, extraction_root)
    return destination


class ArchiveExtractor:
    """Expands zip archives with a path-traversal guard.

    Progress is reported once per phase, never per entry.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.log = logger

    def extract(self, archive_path: Union[str, Path], transcript: Transcript) -> Path:
        """
        Expand ``archive_path`` into its extraction root.

        Returns:
            The extraction root

        Raises:
            PathTraversalError: If any entry would land outside the root.
                Nothing is written in that case.
            ExtractionError: On archive open, entry read, directory/file
                creation or write failure
        """
        job = ExtractionJob.for_archive(Path(archive_path))
        root = job.extraction_root

        if root.exists():
            transcript.append(f"Reusing extracted directory: {root}")
            return root

        try:
            archive = zipfile.ZipFile(job.archive_path)
        except (zipfile.BadZipFile, OSError) as e:
            raise ExtractionError(f"Failed to open archive {job.archive_path}: {e}") from e

        with archive:
            # Validate every name before the first write
            entries: List[Tuple[zipfile.ZipInfo, Path]] = [
                (info, resolve_entry_destination(root, info.filename))
                for info in archive.infolist()
            ]

            transcript.append(f"Creating extraction directory: {root}")
            try:
                root.mkdir(parents=True)
            except OSError as e:
                raise ExtractionError(f"Failed to create extraction directory {root}: {e}") from e

            transcript.append(f"Extracting {job.archive_path.name} ...")
            try:
                for info, destination in entries:
                    self._extract_entry(archive, info, destination)
            except ExtractionError:
                # A half-written root would be mistaken for a finished one
                shutil.rmtree(root, ignore_errors=True)
                raise

        transcript.append(f"Extraction complete: {len(entries)} entries in {root}")
        if self.log:
            self.log.debug(f"Extracted {job.archive_path} -> {root}")
        return root

    def _extract_entry(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo, destination: Path) -> None:
        if info.is_dir():
            self._make_dirs(destination)
            return

        self._make_dirs(destination.parent)

        try:
            source = archive.open(info)
        except (zipfile.BadZipFile, OSError, RuntimeError, NotImplementedError) as e:
            raise ExtractionError(f"Failed to read archive entry '{info.filename}': {e}") from e

        with source:
            try:
                target = open(destination, 'wb')
            except OSError as e:
                raise ExtractionError(f"Failed to create file {destination}: {e}") from e

            with target:
                while True:
                    try:
                        chunk = source.read(COPY_CHUNK_SIZE)
                    except (zipfile.BadZipFile, OSError, EOFError, zlib.error) as e:
                        raise ExtractionError(f"Failed to read archive entry '{info.filename}': {e}") from e
                    if not chunk:
                        break
                    try:
                        target.write(chunk)
                    except OSError as e:
                        raise ExtractionError(f"Failed to write file {destination}: {e}") from e

    @staticmethod
    def _make_dirs(path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractionError(f"Failed to create directory {path}: {e}") from e

"""
Result and value types shared by the deployment stages.

Every object here is created and consumed within a single deployment attempt.
Only the cached artifact and the extraction directory outlive it, on disk.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# Exit code reported when the bridge tool never signals termination
SENTINEL_EXIT_CODE = -1

# Exit code of a handled, non-fatal failure (no device, nothing to install)
HANDLED_FAILURE_EXIT_CODE = 1

SUCCESS_EXIT_CODE = 0


class DeviceStatus(Enum):
    """Outcome of probing the bridge tool for attached devices."""
    NO_DEVICE = "no_device"
    HAS_DEVICES = "has_devices"


@dataclass(frozen=True)
class CacheEntry:
    """
    Where a downloaded artifact lives locally.

    Attributes:
        source_url: URL the artifact is fetched from
        local_path: Cache file path, derived only from the URL's last path
            segment. A file at this path means "already fetched".
    """
    source_url: str
    local_path: Path


@dataclass(frozen=True)
class ExtractionJob:
    """
    An archive and the directory it expands into.

    Attributes:
        archive_path: Cached archive file
        extraction_root: Sibling directory named after the archive without
            its extension. Its existence means "already extracted".
    """
    archive_path: Path
    extraction_root: Path

    @classmethod
    def for_archive(cls, archive_path: Path) -> "ExtractionJob":
        archive_path = Path(archive_path)
        return cls(archive_path, archive_path.with_suffix(''))


@dataclass
class DeploymentResult:
    """
    Outcome of one deployment attempt that ran to a conclusion.

    Attributes:
        transcript: Every progress line of the attempt, each followed by a
            newline, in emission order
        exit_code: 0 = installed, 1 = handled failure, -1 = bridge tool never
            reported termination, anything else = bridge tool's own exit code
    """
    transcript: str
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == SUCCESS_EXIT_CODE

    def __iter__(self):
        # Allows ``transcript, code = result``
        return iter((self.transcript, self.exit_code))

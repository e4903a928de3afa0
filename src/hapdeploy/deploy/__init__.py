"""
Deployment pipeline.

Drives the device bridge tool through one deployment attempt:
    probe device -> fetch artifact (cached) -> extract archive (cached)
    -> locate package -> install

Public API:
    - deploy_package: Pipeline entry point (sink, url) -> DeploymentResult
    - DeploymentOrchestrator: Stage sequencing
    - DeviceProbe, ArtifactFetcher, ArchiveExtractor, Installer: Stages
    - locate_package: Package lookup in an extracted tree
    - DeploymentResult, DeviceStatus, CacheEntry, ExtractionJob: Result types
    - DeploymentError and subclasses: Fatal failures
"""

from .base import (
    DeploymentResult,
    DeviceStatus,
    CacheEntry,
    ExtractionJob,
    SENTINEL_EXIT_CODE,
    HANDLED_FAILURE_EXIT_CODE,
)
from .exceptions import (
    DeploymentError,
    ProcessSpawnError,
    ProcessStreamError,
    FetchError,
    ExtractionError,
    PathTraversalError,
)
from .transcript import Transcript
from .bridge import BridgeTool
from .probe import DeviceProbe
from .fetcher import ArtifactFetcher, cache_filename
from .extractor import ArchiveExtractor, is_archive
from .locator import locate_package, is_package
from .installer import Installer
from .orchestrator import DeploymentOrchestrator, DeploymentStage
from .api import deploy_package

__all__ = [
    # Entry point
    "deploy_package",

    # Result types
    "DeploymentResult",
    "DeviceStatus",
    "CacheEntry",
    "ExtractionJob",
    "SENTINEL_EXIT_CODE",
    "HANDLED_FAILURE_EXIT_CODE",

    # Exceptions
    "DeploymentError",
    "ProcessSpawnError",
    "ProcessStreamError",
    "FetchError",
    "ExtractionError",
    "PathTraversalError",

    # Stages
    "Transcript",
    "BridgeTool",
    "DeviceProbe",
    "ArtifactFetcher",
    "cache_filename",
    "ArchiveExtractor",
    "is_archive",
    "locate_package",
    "is_package",
    "Installer",
    "DeploymentOrchestrator",
    "DeploymentStage",
]

"""
DeploymentOrchestrator - one deployment attempt, start to finish.

Stages run strictly in order, never concurrently and never backwards:

    PROBING -> FETCHING -> EXTRACTING -> LOCATING -> INSTALLING -> DONE

EXTRACTING and LOCATING only happen for archive artifacts. Every stage writes
its progress into one Transcript, which mirrors each line to the caller's
ProgressSink.
"""

import asyncio
from enum import Enum
from pathlib import Path
from typing import Optional

import httpx

from hapdeploy.core.protocols import Logger, ProcessRunner, ProgressSink
from hapdeploy.deploy.base import HANDLED_FAILURE_EXIT_CODE, DeploymentResult, DeviceStatus
from hapdeploy.deploy.bridge import BridgeTool
from hapdeploy.deploy.extractor import ArchiveExtractor, is_archive
from hapdeploy.deploy.fetcher import ArtifactFetcher
from hapdeploy.deploy.installer import Installer
from hapdeploy.deploy.locator import PACKAGE_EXTENSION, locate_package
from hapdeploy.deploy.probe import DeviceProbe
from hapdeploy.deploy.transcript import Transcript

NO_DEVICE_HELP_URL = 'https://developer.huawei.com/consumer/en/doc/harmonyos-guides/hdc'


class DeploymentStage(Enum):
    PROBING = "probing"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    LOCATING = "locating"
    INSTALLING = "installing"
    DONE = "done"


class DeploymentOrchestrator:
    """
    Sequences probe, fetch, extract, locate and install.

    Args:
        probe: Device presence check
        fetcher: Artifact download/cache
        extractor: Archive expansion
        installer: Bridge tool install step
        logger: Diagnostics (optional)
    """

    def __init__(
        self,
        probe: DeviceProbe,
        fetcher: ArtifactFetcher,
        extractor: ArchiveExtractor,
        installer: Installer,
        logger: Optional[Logger] = None
    ):
        self.probe = probe
        self.fetcher = fetcher
        self.extractor = extractor
        self.installer = installer
        self.log = logger
        self.stage: Optional[DeploymentStage] = None

    @classmethod
    def create(
        cls,
        runner: ProcessRunner,
        cache_dir: Path,
        bridge_tool: str = 'hdc',
        download_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[Logger] = None
    ) -> "DeploymentOrchestrator":
        """Wire up the standard stages around one bridge tool."""
        bridge = BridgeTool(runner, bridge_tool)
        fetcher_kwargs = {} if download_timeout is None else {"timeout": download_timeout}
        return cls(
            probe=DeviceProbe(bridge),
            fetcher=ArtifactFetcher(cache_dir, transport=transport, logger=logger, **fetcher_kwargs),
            extractor=ArchiveExtractor(logger=logger),
            installer=Installer(bridge),
            logger=logger
        )

    def _enter(self, stage: DeploymentStage) -> None:
        self.stage = stage
        if self.log:
            self.log.debug(f"Stage: {stage.value}")

    async def deploy(self, sink: ProgressSink, url: str) -> DeploymentResult:
        """
        Run one deployment attempt for ``url``.

        Returns:
            DeploymentResult. exit_code 1 with a full transcript for the
            handled failures (no device, no package in the archive).

        Raises:
            DeploymentError: Any fatal failure (spawn, download, extraction);
                the attempt stops at the failing stage
        """
        transcript = Transcript(sink)

        self._enter(DeploymentStage.PROBING)
        status = await self.probe.probe(transcript)
        if status is DeviceStatus.NO_DEVICE:
            transcript.append(
                "No device connected. Connect a device with USB debugging enabled "
                f"and try again. Help: {NO_DEVICE_HELP_URL}"
            )
            return self._finish(transcript, HANDLED_FAILURE_EXIT_CODE)

        self._enter(DeploymentStage.FETCHING)
        entry = await self.fetcher.fetch(url, transcript)
        package_path = entry.local_path

        if is_archive(entry.local_path):
            self._enter(DeploymentStage.EXTRACTING)
            extraction_root = await asyncio.to_thread(
                self.extractor.extract, entry.local_path, transcript
            )

            self._enter(DeploymentStage.LOCATING)
            located = await asyncio.to_thread(locate_package, extraction_root)
            if located is None:
                transcript.append(
                    f"No {PACKAGE_EXTENSION} package found in {extraction_root}; nothing to install"
                )
                return self._finish(transcript, HANDLED_FAILURE_EXIT_CODE)
            transcript.append(f"Found package: {located}")
            package_path = located

        self._enter(DeploymentStage.INSTALLING)
        result = await self.installer.install(package_path, transcript)
        self._enter(DeploymentStage.DONE)
        return result

    def _finish(self, transcript: Transcript, exit_code: int) -> DeploymentResult:
        self._enter(DeploymentStage.DONE)
        return DeploymentResult(transcript.text, exit_code)

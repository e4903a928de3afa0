"""Pipeline entry point."""

from typing import Optional

import httpx

from hapdeploy.core.implementations import AsyncioProcessRunner
from hapdeploy.core.protocols import Logger, ProcessRunner, ProgressSink
from hapdeploy.deploy.base import DeploymentResult
from hapdeploy.deploy.orchestrator import DeploymentOrchestrator
from hapdeploy.utils.config import DeployConfig


async def deploy_package(
    sink: ProgressSink,
    url: str,
    config: Optional[DeployConfig] = None,
    runner: Optional[ProcessRunner] = None,
    logger: Optional[Logger] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> DeploymentResult:
    """Deploy the package at ``url`` to the connected device.

    Args:
        sink: Receives every progress line as it is produced
        url: Download URL of a package or of a zip archive containing one
        config: Settings (defaults if None)
        runner: Process runner (real subprocesses if None)
        logger: Diagnostics (optional)
        transport: httpx transport override for downloads

    Returns:
        DeploymentResult(transcript, exit_code)

    Raises:
        DeploymentError: If the attempt failed fatally
    """
    config = config or DeployConfig()
    orchestrator = DeploymentOrchestrator.create(
        runner=runner or AsyncioProcessRunner(),
        cache_dir=config.cache_dir,
        bridge_tool=config.bridge_tool,
        download_timeout=config.download_timeout,
        transport=transport,
        logger=logger
    )
    return await orchestrator.deploy(sink, url)

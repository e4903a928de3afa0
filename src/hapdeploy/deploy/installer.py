"""Installer - push a package onto the device with the bridge tool."""

from pathlib import Path
from typing import Union

from hapdeploy.deploy.base import SENTINEL_EXIT_CODE, SUCCESS_EXIT_CODE, DeploymentResult
from hapdeploy.deploy.bridge import BridgeTool
from hapdeploy.deploy.transcript import Transcript

INSTALL_SUBCOMMAND = 'install'


class Installer:
    """Runs ``<bridge> install <package>`` and reports the outcome."""

    def __init__(self, bridge: BridgeTool):
        self.bridge = bridge

    async def install(self, package_path: Union[str, Path], transcript: Transcript) -> DeploymentResult:
        """Install ``package_path`` and return the final (transcript, code).

        Raises:
            ProcessSpawnError: If the bridge tool could not be started
        """
        package_path = str(package_path)
        transcript.append(f"Installing {package_path} ...")

        exit_code = await self.bridge.run([INSTALL_SUBCOMMAND, package_path], transcript)

        if exit_code == SUCCESS_EXIT_CODE:
            transcript.append("✓ Install succeeded")
        elif exit_code != SENTINEL_EXIT_CODE:
            transcript.append(f"✗ Install failed (exit code {exit_code})")

        return DeploymentResult(transcript.text, exit_code)

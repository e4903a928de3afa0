"""DeviceProbe - ask the bridge tool which devices are attached."""

from hapdeploy.deploy.base import DeviceStatus
from hapdeploy.deploy.bridge import STDERR_PREFIX, BridgeTool
from hapdeploy.deploy.transcript import Transcript

LIST_TARGETS_ARGS = ['list', 'targets']

# Printed by the bridge tool when no device is attached
NO_DEVICES_MARKER = '[Empty]'

# Our own stderr prefix plus the bridge tool's failure marker
ERROR_MARKERS = (STDERR_PREFIX.strip(), '[Fail]')


def classify_probe_output(output: str) -> DeviceStatus:
    """Classify ``list targets`` output by substring inspection.

    The bridge tool offers no structured device listing, so the free-text
    markers are the contract.
    """
    if NO_DEVICES_MARKER in output:
        return DeviceStatus.NO_DEVICE
    if any(marker in output for marker in ERROR_MARKERS):
        return DeviceStatus.NO_DEVICE
    return DeviceStatus.HAS_DEVICES


class DeviceProbe:
    """Lists connected devices through the bridge tool."""

    def __init__(self, bridge: BridgeTool):
        self.bridge = bridge

    async def probe(self, transcript: Transcript) -> DeviceStatus:
        """Run ``list targets`` and classify what it printed.

        Raises:
            ProcessSpawnError: If the bridge tool could not be started
        """
        first_line = len(transcript)
        await self.bridge.run(LIST_TARGETS_ARGS, transcript)
        output = '\n'.join(transcript.lines[first_line:])
        return classify_probe_output(output)

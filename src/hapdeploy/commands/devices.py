"""Devices command - check whether the bridge tool sees a device"""
import asyncio

from hapdeploy.commands import FATAL_EXIT_STATUS, add_common_arguments, check_bridge_tool
from hapdeploy.core import AsyncioProcessRunner, ConsoleLogger, ConsoleProgressSink, SystemToolLocator
from hapdeploy.deploy import BridgeTool, DeploymentError, DeviceProbe, DeviceStatus, Transcript
from hapdeploy.deploy.orchestrator import NO_DEVICE_HELP_URL
from hapdeploy.utils.config import ConfigError, load_config


def setup_parser(parser):
    """Setup argument parser for devices command"""
    add_common_arguments(parser)


async def probe_devices(config, sink, runner=None) -> DeviceStatus:
    """Run only the device probe stage."""
    bridge = BridgeTool(runner or AsyncioProcessRunner(), config.bridge_tool)
    return await DeviceProbe(bridge).probe(Transcript(sink))


def execute(args):
    """Execute devices command"""
    logger = ConsoleLogger(verbose=args.verbose)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(str(e))
        return FATAL_EXIT_STATUS

    if not check_bridge_tool(config, SystemToolLocator(), logger):
        return FATAL_EXIT_STATUS

    try:
        status = asyncio.run(probe_devices(config, ConsoleProgressSink()))
    except DeploymentError as e:
        logger.error(str(e))
        return FATAL_EXIT_STATUS

    if status is DeviceStatus.HAS_DEVICES:
        print("\n✓ Device connected")
        return 0

    print("\n✗ No device connected")
    print(f"  Help: {NO_DEVICE_HELP_URL}")
    return 1

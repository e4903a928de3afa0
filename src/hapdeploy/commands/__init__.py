"""CLI subcommands. Each module exposes setup_parser(parser) and execute(args)."""

from hapdeploy.core.protocols import Logger, ToolLocator
from hapdeploy.utils.config import DeployConfig

# Exit status when the pipeline itself broke (as opposed to a handled failure)
FATAL_EXIT_STATUS = 2


def add_common_arguments(parser):
    """Options shared by every subcommand."""
    parser.add_argument(
        '--config',
        help='Path to hapdeploy.yaml (default: $HAPDEPLOY_CONFIG or ./hapdeploy.yaml)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show debug output'
    )


def check_bridge_tool(config: DeployConfig, tools: ToolLocator, logger: Logger) -> bool:
    """Pre-flight: make sure the bridge tool can be found before spawning it."""
    if tools.has_tool(config.bridge_tool):
        logger.debug(f"Using bridge tool: {tools.find_tool(config.bridge_tool)}")
        return True

    logger.error(f"Bridge tool '{config.bridge_tool}' not found in PATH")
    logger.info("Install the device bridge tool (hdc) from the HarmonyOS SDK toolchains,")
    logger.info("or set bridge.tool in hapdeploy.yaml to its full path.")
    return False

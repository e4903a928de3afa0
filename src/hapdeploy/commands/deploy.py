"""Deploy command - one deployment attempt for a package URL or catalog build"""
import asyncio
import sys

from hapdeploy.catalog import BuildCatalogClient, BuildQuery, CatalogError
from hapdeploy.commands import FATAL_EXIT_STATUS, add_common_arguments, check_bridge_tool
from hapdeploy.core import (
    ConsoleLogger,
    ConsoleProgressSink,
    JsonLinesProgressSink,
    SystemToolLocator,
)
from hapdeploy.deploy import SENTINEL_EXIT_CODE, DeploymentError, deploy_package
from hapdeploy.utils.config import ConfigError, load_config


def setup_parser(parser):
    """Setup argument parser for deploy command"""
    parser.epilog = (
        'Exit status: 0 installed; 1 not installed (no device, no package, '
        'or hdc reported a failure); 2 the deployment itself failed.'
    )
    parser.add_argument(
        'url',
        nargs='?',
        help='Download URL of a .hap package or a .zip archive containing one'
    )
    parser.add_argument(
        '--build-id',
        type=int,
        help='Deploy a build from the build catalog instead of a URL'
    )
    parser.add_argument(
        '--app-name',
        help='Narrow the catalog lookup for --build-id to one app'
    )
    parser.add_argument(
        '--branch',
        help='Narrow the catalog lookup for --build-id to one branch'
    )
    parser.add_argument(
        '--json-events',
        action='store_true',
        help='Print progress as JSON lines ({"channel": ..., "line": ...}) on stdout'
    )
    add_common_arguments(parser)


async def resolve_build_url(config, build_id, app_name=None, branch=None):
    """Look a build up in the catalog and return its full download URL."""
    if not config.catalog_url:
        raise CatalogError("No catalog configured (set catalog.base_url in hapdeploy.yaml)")

    client = BuildCatalogClient(config.catalog_url)
    record = await client.find_build(build_id, BuildQuery(app_name=app_name, branch=branch))
    if record is None:
        raise CatalogError(f"Build {build_id} not found in catalog")
    download_base = await client.get_download_base(config.download_config_name)
    return record.resolve_download_url(download_base)


def exit_status(exit_code: int) -> int:
    """Map a deployment exit code to a process exit status.

    hdc codes pass through. The sentinel and codes outside 0-255 or equal to
    FATAL_EXIT_STATUS become 1, so status 2 always means the pipeline broke.
    """
    if exit_code == SENTINEL_EXIT_CODE or exit_code == FATAL_EXIT_STATUS:
        return 1
    if not 0 <= exit_code <= 255:
        return 1
    return exit_code


def execute(args):
    """Execute deploy command"""
    json_events = getattr(args, 'json_events', False)
    # Keep stdout clean for JSON consumers
    logger = ConsoleLogger(verbose=args.verbose, stream=sys.stderr if json_events else None)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(str(e))
        return FATAL_EXIT_STATUS

    if bool(args.url) == (args.build_id is not None):
        logger.error("Specify exactly one of URL or --build-id")
        return FATAL_EXIT_STATUS

    if not check_bridge_tool(config, SystemToolLocator(), logger):
        return FATAL_EXIT_STATUS

    url = args.url
    if args.build_id is not None:
        try:
            url = asyncio.run(resolve_build_url(config, args.build_id, args.app_name, args.branch))
        except CatalogError as e:
            logger.error(str(e))
            return FATAL_EXIT_STATUS
        logger.info(f"Build {args.build_id}: {url}")

    if json_events:
        sink = JsonLinesProgressSink(channel=config.progress_channel)
    else:
        sink = ConsoleProgressSink()
        print("=" * 80)
        print(f"Deploying {url}")
        print("=" * 80)

    try:
        result = asyncio.run(deploy_package(sink, url, config=config, logger=logger))
    except DeploymentError as e:
        logger.error(f"Deployment failed: {e}")
        return FATAL_EXIT_STATUS

    if not json_events:
        print("=" * 80)
        if result.succeeded:
            print("✓ Deployment complete")
        else:
            print(f"✗ Deployment did not complete (exit code {result.exit_code})")

    return exit_status(result.exit_code)

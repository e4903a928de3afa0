"""Builds command - list builds published in the build catalog"""
import asyncio

from hapdeploy.catalog import BuildCatalogClient, BuildQuery, CatalogError
from hapdeploy.commands import FATAL_EXIT_STATUS, add_common_arguments
from hapdeploy.core import ConsoleLogger
from hapdeploy.utils.config import ConfigError, load_config


def setup_parser(parser):
    """Setup argument parser for builds command"""
    parser.add_argument('--app-name', help='Filter by application name')
    parser.add_argument('--branch', help='Filter by branch')
    parser.add_argument('--build-type', help='Filter by build type (debug, release)')
    parser.add_argument('--page', type=int, default=1, help='Page number (default: 1)')
    parser.add_argument('--page-size', type=int, default=10, help='Builds per page (default: 10)')
    parser.add_argument(
        '--catalog-url',
        help='Build catalog server (overrides catalog.base_url in config)'
    )
    add_common_arguments(parser)


async def fetch_builds(client, query, download_config_name):
    """Return (page, download_base) for one listing."""
    page = await client.query_builds(query)
    download_base = await client.get_download_base(download_config_name)
    return page, download_base


def format_builds(page, download_base):
    """Render a build page as table lines."""
    lines = [
        f"{'ID':>6}  {'App':<20} {'Type':<8} {'Branch':<20} {'Build':<10} {'Built':<20}",
        "-" * 90,
    ]
    for record in page.records:
        lines.append(
            f"{record.id:>6}  {record.app_name:<20} {record.build_type:<8} "
            f"{record.branch:<20} {record.build_number:<10} {record.build_time:<20}"
        )
        try:
            lines.append(f"{'':>8}{record.resolve_download_url(download_base)}")
        except CatalogError:
            lines.append(f"{'':>8}(no download URL)")
    lines.append("-" * 90)
    lines.append(f"{len(page.records)} of {page.total} build(s)")
    return lines


def execute(args):
    """Execute builds command"""
    logger = ConsoleLogger(verbose=args.verbose)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(str(e))
        return FATAL_EXIT_STATUS

    catalog_url = args.catalog_url or config.catalog_url
    if not catalog_url:
        logger.error("No catalog configured")
        logger.info("Pass --catalog-url or set catalog.base_url in hapdeploy.yaml")
        return FATAL_EXIT_STATUS

    query = BuildQuery(
        app_name=args.app_name,
        build_type=args.build_type,
        branch=args.branch,
        page=args.page,
        page_size=args.page_size
    )

    try:
        page, download_base = asyncio.run(
            fetch_builds(BuildCatalogClient(catalog_url), query, config.download_config_name)
        )
    except CatalogError as e:
        logger.error(f"Could not list builds: {e}")
        return FATAL_EXIT_STATUS

    if not page.records:
        print("No builds found.")
        return 0

    for line in format_builds(page, download_base):
        print(line)
    return 0

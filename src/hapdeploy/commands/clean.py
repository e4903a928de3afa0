"""Clean cached downloads and extraction directories command"""
import shutil

from hapdeploy.commands import FATAL_EXIT_STATUS, add_common_arguments
from hapdeploy.deploy.extractor import is_archive
from hapdeploy.deploy.fetcher import PARTIAL_SUFFIX
from hapdeploy.deploy.locator import is_package
from hapdeploy.utils.config import ConfigError, load_config


def setup_parser(parser):
    """Setup argument parser for clean command"""
    parser.add_argument(
        '--downloads',
        action='store_true',
        help='Clean only cached downloads'
    )
    parser.add_argument(
        '--extracted',
        action='store_true',
        help='Clean only extraction directories'
    )
    parser.add_argument(
        '--all',
        action='store_true',
        help='Clean everything (default if no option specified)'
    )
    add_common_arguments(parser)


def is_cached_artifact(path):
    """True for files the pipeline writes into the cache directory."""
    return is_archive(path) or is_package(path) or path.name.endswith(PARTIAL_SUFFIX)


def execute(args):
    """Execute clean command"""
    # Default to --all if no specific option given
    if not args.downloads and not args.extracted:
        args.all = True

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}")
        return FATAL_EXIT_STATUS

    cache_dir = config.cache_dir
    if not cache_dir.exists():
        print("Nothing to clean.")
        return 0

    cleaned_items = []
    entries = sorted(cache_dir.iterdir())
    # Only entries the pipeline writes are removed
    archives = {p.with_suffix('').name for p in entries if p.is_file() and is_archive(p)}

    # Extraction roots: directories sitting next to a same-named archive
    if args.extracted or args.all:
        print("Cleaning extraction directories...")
        for path in entries:
            if path.is_dir() and path.name in archives:
                try:
                    shutil.rmtree(path)
                    cleaned_items.append(f"Extracted: {path.name}/")
                except Exception as e:
                    print(f"Warning: Could not remove {path}: {e}")

    # Cached artifacts (and interrupted .part downloads)
    if args.downloads or args.all:
        print("Cleaning cached downloads...")
        for path in entries:
            if path.is_file() and is_cached_artifact(path):
                try:
                    path.unlink()
                    label = "Partial download" if path.name.endswith(PARTIAL_SUFFIX) else "Download"
                    cleaned_items.append(f"{label}: {path.name}")
                except Exception as e:
                    print(f"Warning: Could not remove {path}: {e}")

    # Report what was cleaned
    if cleaned_items:
        print("\nCleaned:")
        for item in cleaned_items:
            print(f"  ✓ {item}")
        print("\nDone!")
        return 0
    else:
        print("Nothing to clean.")
        return 0

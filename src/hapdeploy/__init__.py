"""
hapdeploy - deploy HarmonyOS application packages to a connected device

A command-line front end for the deployment pipeline: probe for a device,
download (and cache) the package, unpack archives, and install through the
device bridge tool (hdc).
"""
import argparse
import sys

__version__ = "0.1.0"


def main(argv=None):
    """Main CLI entry point"""
    from hapdeploy.commands import builds, clean, deploy, devices

    parser = argparse.ArgumentParser(
        prog='hapdeploy',
        description='hapdeploy: install application packages on a connected device',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  hapdeploy devices                                   # Is a device attached?
  hapdeploy deploy https://example.com/app.hap        # Install a package
  hapdeploy deploy https://example.com/bundle.zip     # Install the .hap inside an archive
  hapdeploy deploy --json-events URL                  # Machine-readable progress
  hapdeploy builds --app-name shop --branch main      # List catalog builds
  hapdeploy deploy --build-id 42                      # Install a catalog build
  hapdeploy clean                                     # Remove cached downloads
        '''
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Deploy command
    deploy_parser = subparsers.add_parser('deploy', help='Deploy a package to the device')
    deploy.setup_parser(deploy_parser)

    # Devices command
    devices_parser = subparsers.add_parser('devices', help='Check for a connected device')
    devices.setup_parser(devices_parser)

    # Builds command
    builds_parser = subparsers.add_parser('builds', help='List builds in the build catalog')
    builds.setup_parser(builds_parser)

    # Clean command
    clean_parser = subparsers.add_parser('clean', help='Clean cached downloads')
    clean.setup_parser(clean_parser)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Dispatch to command handler
    handlers = {
        'deploy': deploy.execute,
        'devices': devices.execute,
        'builds': builds.execute,
        'clean': clean.execute,
    }
    try:
        sys.exit(handlers[args.command](args))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()

"""Main CLI entry point for modman."""

import argparse
import sys

from modman import __version__
from modman.cli.commands import build_registry
from modman.cli.router import CommandContext, dispatch
from modman.errors import ConfigError, HookFailedError, ModmanError
from modman.logging import configure_logging, get_logger
from modman.settings import Settings

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='modman',
        description='Install bundles and drive project lifecycle hooks',
        epilog='Options go before the command; everything after it is passed to the command. '
        'Run `modman help` for the list of commands.',
    )
    parser.add_argument('command', nargs='?', help='Subcommand to run')
    parser.add_argument(
        'args',
        nargs=argparse.REMAINDER,
        help='Arguments for the subcommand, passed through unparsed',
    )
    parser.add_argument(
        '-v',
        '--verbose',
        action='store_true',
        default=None,
        help='Enable verbose logging (env: VERBOSE)',
    )
    parser.add_argument(
        '--offline',
        action='store_true',
        default=None,
        help='Never touch the network, use cached sources only (env: MODMAN_OFFLINE)',
    )
    parser.add_argument('--tree', help='Install tree (env: MODMAN_TREE)')
    parser.add_argument('--buildpath', help='Build output directory (env: MODMAN_BUILDPATH)')
    parser.add_argument(
        '--build-type',
        choices=['release', 'debug', 'develop'],
        help='Build type (env: MODMAN_BUILD_TYPE)',
    )
    parser.add_argument('--workers', type=int, help='Parallel compile workers (env: MODMAN_WORKERS)')
    parser.add_argument('--pkglist', help='Package listing source (env: MODMAN_PKGLIST)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def resolve_settings(namespace: argparse.Namespace) -> Settings:
    """Layer CLI options over the environment."""
    return Settings.from_environ(
        verbose=namespace.verbose,
        offline=namespace.offline,
        tree=namespace.tree,
        buildpath=namespace.buildpath,
        build_type=namespace.build_type,
        workers=namespace.workers,
        pkglist=namespace.pkglist,
    )


def positional_tokens(namespace: argparse.Namespace) -> list[str]:
    """The subcommand followed by its arguments, or nothing."""
    if namespace.command is None:
        return []
    return [namespace.command, *namespace.args]


def exit_status(status: int) -> int:
    """Process exit code for a failed hook; signals map to 128 + signal number."""
    if status > 0:
        return status
    if status < 0:
        return 128 - status
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the modman CLI."""
    parser = create_parser()
    namespace = parser.parse_args(argv)
    positionals = positional_tokens(namespace)

    try:
        settings = resolve_settings(namespace)
    except ConfigError as e:
        sys.stderr.write(f'Error: {e}\n')
        return 1

    configure_logging(verbose=settings.verbose)
    logger.debug('starting_modman', positionals=positionals, _verbose_settings=settings.as_display_dict())

    context = CommandContext(settings=settings, registry=build_registry())
    try:
        return dispatch(context, positionals)
    except HookFailedError as e:
        logger.error('hook_failed', hook=e.hook, status=e.status)
        sys.stderr.write(f'Error: {e}\n')
        return exit_status(e.status)
    except ModmanError as e:
        logger.error('command_failed', error=str(e))
        sys.stderr.write(f'Error: {e}\n')
        return 1
    except Exception as e:  # noqa: BLE001 - top-level CLI guard
        logger.exception('cli_operation_failed', error=str(e))
        sys.stderr.write(f'Error: {e}\n')
        return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == '__main__':
    run()

"""help and show-config."""

import sys

import yaml

from modman import __version__
from modman.cli.router import CommandContext, CommandRegistry

from . import _shared


def _help(context: CommandContext) -> None:
    commands = list(context.registry)
    width = max(len(command.synopsis) for command in commands)
    lines = [
        f'modman {__version__}',
        '',
        'usage: modman [options] <command> [args...]',
        '',
        'commands:',
    ]
    lines.extend(f'  {command.synopsis:<{width}}  {command.summary}' for command in commands)
    lines.extend(['', 'Run `modman --help` for the list of options.'])
    _shared.write_lines(lines)


def _show_config(context: CommandContext) -> None:
    sys.stdout.write(
        yaml.safe_dump(context.settings.as_display_dict(), sort_keys=True, default_flow_style=False),
    )


def register(registry: CommandRegistry) -> None:
    """Register help and show-config."""
    registry.add('help', _help, 'Show this help')
    registry.add('show-config', _show_config, 'Print the resolved configuration')

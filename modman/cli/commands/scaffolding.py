"""Project scaffolding, environments and quickbin."""

from pathlib import Path

from modman.capabilities import load_capability
from modman.cli.router import CommandContext, CommandRegistry
from modman.scaffold import create_env, create_project


def _new_project(context: CommandContext, name: str) -> None:
    create_project('full', name, context.cwd)


def _new_simple_project(context: CommandContext, name: str) -> None:
    create_project('simple', name, context.cwd)


def _new_c_project(context: CommandContext, name: str) -> None:
    create_project('c', name, context.cwd)


def _new_exe_project(context: CommandContext, name: str) -> None:
    create_project('exe', name, context.cwd)


def _env(context: CommandContext, name: str) -> None:
    create_env(name, context.cwd)


def _quickbin(context: CommandContext, entry: str, output: str) -> None:
    native = load_capability('native')
    native.quickbin(context.cwd / Path(entry), context.cwd / Path(output), context.settings)


def register(registry: CommandRegistry) -> None:
    """Register the scaffolding commands."""
    registry.add('env', _env, 'Create an environment with its own install tree', 'name')
    registry.add('new-project', _new_project, 'Create a project with a package and tests', 'name')
    registry.add('new-simple-project', _new_simple_project, 'Create a single-module project', 'name')
    registry.add('new-c-project', _new_c_project, 'Create a project built with the C compiler', 'name')
    registry.add('new-exe-project', _new_exe_project, 'Create an executable project', 'name')
    registry.add('quickbin', _quickbin, 'Pack a script into a standalone executable', 'entry output')

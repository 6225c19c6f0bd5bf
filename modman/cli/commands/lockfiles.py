"""save-lockfile and load-lockfile."""

from pathlib import Path

from modman import lockfile
from modman.cli.router import CommandContext, CommandRegistry

from . import _shared


def _save_lockfile(context: CommandContext, dest: str = lockfile.DEFAULT_LOCKFILE) -> None:
    store = _shared.open_store(context)
    lockfile.save(context.cwd / Path(dest), store.list_installed())


def _load_lockfile(context: CommandContext, src: str = lockfile.DEFAULT_LOCKFILE) -> None:
    store = _shared.open_store(context)
    lockfile.load(context.cwd / Path(src), store)


def register(registry: CommandRegistry) -> None:
    """Register the lockfile commands."""
    registry.add('save-lockfile', _save_lockfile, 'Record every installed bundle in a lockfile', '[dest]')
    registry.add('load-lockfile', _load_lockfile, 'Install every bundle listed in a lockfile', '[src]')

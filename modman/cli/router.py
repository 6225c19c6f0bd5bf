"""Command registry and dispatch."""

import inspect
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from modman.errors import UnknownCommandError, UsageError
from modman.logging import get_logger
from modman.settings import Settings

logger = get_logger(__name__)

HELP_COMMAND = 'help'

Handler = Callable[..., int | None]


class Command(BaseModel):
    """A named subcommand and the handler implementing it."""

    model_config = ConfigDict(frozen=True)

    name: str
    handler: Handler
    summary: str
    usage: str = ''

    @property
    def synopsis(self) -> str:
        return f'{self.name} {self.usage}'.strip()

    def invoke(self, context: 'CommandContext', args: Sequence[str]) -> int:
        """Run the handler; ``None`` from the handler means success."""
        try:
            inspect.signature(self.handler).bind(context, *args)
        except TypeError as exc:
            msg = f'usage: modman {self.synopsis}'
            raise UsageError(msg) from exc
        status = self.handler(context, *args)
        return 0 if status is None else int(status)


class CommandRegistry:
    """Subcommands by exact, case-sensitive name, in registration order."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def add(self, name: str, handler: Handler, summary: str, usage: str = '') -> Command:
        if name in self._commands:
            msg = f'command {name!r} registered twice'
            raise ValueError(msg)
        command = Command(name=name, handler=handler, summary=summary, usage=usage)
        self._commands[name] = command
        return command

    def get(self, name: str) -> Command | None:
        return self._commands.get(name)

    def names(self) -> list[str]:
        return list(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)


class CommandContext(BaseModel):
    """What every handler receives: settings and the command table."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    settings: Settings
    registry: CommandRegistry
    cwd: Path = Field(default_factory=Path.cwd)


def dispatch(context: CommandContext, positionals: Sequence[str]) -> int:
    """Route the positional tokens to exactly one command.

    No tokens runs ``help``. An unknown first token raises
    UnknownCommandError before any handler runs.
    """
    registry = context.registry
    if not positionals:
        help_command = registry.get(HELP_COMMAND)
        if help_command is not None:
            help_command.invoke(context, [])
        return 0

    name, *args = positionals
    command = registry.get(name)
    if command is None:
        raise UnknownCommandError(name, registry.names())

    logger.debug('dispatching_command', command=name, _debug_args=args)
    return command.invoke(context, args)


__all__ = ['Command', 'CommandContext', 'CommandRegistry', 'HELP_COMMAND', 'dispatch']

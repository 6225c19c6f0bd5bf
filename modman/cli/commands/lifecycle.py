"""Project lifecycle commands, all routed through the hook invoker."""

from modman.cli.router import CommandContext, CommandRegistry

from . import _shared


def _build(context: CommandContext) -> None:
    _shared.invoke_hook(context, 'build')


def _clean(context: CommandContext) -> None:
    _shared.invoke_hook(context, 'clean')


def _clean_all(context: CommandContext) -> None:
    _shared.invoke_hook(context, 'clean-all')


def _test(context: CommandContext) -> None:
    _shared.invoke_hook(context, 'check')


def _run(context: CommandContext, task: str) -> None:
    _shared.invoke_hook(context, 'run', task=task)


def _hook(context: CommandContext, name: str, *args: str) -> None:
    _shared.invoke_hook(context, name, args=list(args))


def register(registry: CommandRegistry) -> None:
    """Register the lifecycle commands."""
    registry.add('build', _build, 'Run the build hook of the current project')
    registry.add('clean', _clean, 'Run the clean hook of the current project')
    registry.add('clean-all', _clean_all, 'Run the clean-all hook of the current project')
    registry.add('test', _test, 'Run the check hook of the current project')
    registry.add('run', _run, 'Run a named task of the current project', 'task')
    registry.add('hook', _hook, 'Invoke a lifecycle hook directly', 'name [args...]')

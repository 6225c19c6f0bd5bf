"""Collaborators shared by the command handlers."""

import sys
from collections.abc import Iterable

from modman.cli.router import CommandContext
from modman.hooks import HookInvoker
from modman.models import HookResult
from modman.project import Project, load_project
from modman.store import BundleStore


def open_store(context: CommandContext) -> BundleStore:
    """The bundle store for the configured tree."""
    return BundleStore(context.settings)


def current_project(context: CommandContext) -> Project:
    """The project enclosing the working directory."""
    return load_project(context.cwd)


def invoke_hook(context: CommandContext, hook_name: str, **arg_bag: object) -> HookResult:
    """Invoke a lifecycle hook in the current project; failures raise HookFailedError."""
    invoker = HookInvoker(context.settings, start=context.cwd)
    return invoker.invoke(hook_name, dict(arg_bag))


def write_lines(lines: Iterable[str]) -> None:
    """Write data output, one item per line."""
    for line in lines:
        sys.stdout.write(f'{line}\n')

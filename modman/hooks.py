"""Lifecycle hook invocation.

A project implements hooks either as shell command lists in ``project.yaml``
(``hooks:`` and, for ``run``, ``tasks:``) or as functions in the Python file
named by ``hooks_module``. A function wins over a command list. A hook the
project does not implement is a successful no-op.
"""

import os
import shlex
import subprocess
from collections.abc import Callable
from pathlib import Path
from string import Template
from typing import Any

from modman.errors import HookFailedError, ModmanError, UnknownHookError, UnknownTaskError
from modman.logging import get_logger
from modman.models import HookResult
from modman.project import Project, load_project
from modman.settings import Settings

logger = get_logger(__name__)

HOOK_NAMES = ('build', 'clean', 'clean-all', 'check', 'run')

HookImplementation = Callable[[dict[str, Any]], None]


def python_hook_name(hook_name: str) -> str:
    """Function name implementing ``hook_name`` in a hooks module."""
    return hook_name.replace('-', '_')


class CommandHook:
    """Runs a list of shell commands inside the project root."""

    def __init__(self, hook_name: str, commands: list[str], root: Path, env: dict[str, str]) -> None:
        self.hook_name = hook_name
        self.commands = commands
        self.root = root
        self.env = env

    def __call__(self, arg_bag: dict[str, Any]) -> None:
        for command in self.commands:
            expanded = Template(command).safe_substitute(self.env)
            logger.info('running_hook_command', hook=self.hook_name, command=expanded)
            try:
                result = subprocess.run(  # noqa: S603 - commands come from the project descriptor
                    shlex.split(expanded),
                    cwd=self.root,
                    env=self.env,
                    check=False,
                )
            except FileNotFoundError as e:
                raise HookFailedError(self.hook_name, 127, f'command not found: {expanded}') from e
            if result.returncode != 0:
                raise HookFailedError(self.hook_name, result.returncode, expanded)
            arg_bag['results'].append({'command': expanded, 'status': result.returncode})


class FunctionHook:
    """Calls a function from the project's hooks module."""

    def __init__(self, hook_name: str, function: Callable[[dict[str, Any]], Any]) -> None:
        self.hook_name = hook_name
        self.function = function

    def __call__(self, arg_bag: dict[str, Any]) -> None:
        logger.info('running_hook_function', hook=self.hook_name, function=self.function.__name__)
        try:
            value = self.function(arg_bag)
        except ModmanError:
            raise
        except Exception as e:
            raise HookFailedError(self.hook_name, 1, str(e)) from e
        if isinstance(value, int) and not isinstance(value, bool) and value != 0:
            raise HookFailedError(self.hook_name, value)
        if value is not None:
            arg_bag['results'].append(value)


class HookInvoker:
    """Sends a hook name and an argument bag to the current project."""

    def __init__(
        self,
        settings: Settings,
        *,
        project: Project | None = None,
        start: Path | None = None,
    ) -> None:
        self.settings = settings
        self.project = project
        self.start = start

    def _project(self) -> Project:
        if self.project is None:
            self.project = load_project(self.start)
        return self.project

    def _environment(self, project: Project, hook_name: str, arg_bag: dict[str, Any]) -> dict[str, str]:
        env = dict(os.environ)
        env.update(self.settings.hook_environment())
        env['MODMAN_PROJECT'] = project.name
        env['MODMAN_PROJECT_ROOT'] = str(project.root)
        env['MODMAN_HOOK'] = hook_name
        if arg_bag.get('task'):
            env['MODMAN_TASK'] = str(arg_bag['task'])
        if arg_bag.get('args'):
            env['MODMAN_HOOK_ARGS'] = shlex.join(str(a) for a in arg_bag['args'])
        return env

    def resolve(self, project: Project, hook_name: str, arg_bag: dict[str, Any]) -> HookImplementation | None:
        """Find the implementation of ``hook_name``, or ``None`` if there is none."""
        module = project.hooks_module()
        function = getattr(module, python_hook_name(hook_name), None) if module else None
        if callable(function):
            return FunctionHook(hook_name, function)

        env = self._environment(project, hook_name, arg_bag)
        if hook_name != 'run':
            commands = project.metadata.hooks.get(hook_name)
            return CommandHook(hook_name, commands, project.root, env) if commands else None

        tasks = project.metadata.tasks
        if not tasks:
            return None
        task = arg_bag.get('task')
        if task not in tasks:
            known = ', '.join(sorted(tasks))
            msg = f'unknown task {task!r} in project {project.name} (known tasks: {known})'
            raise UnknownTaskError(msg)
        return CommandHook(f'run:{task}', tasks[task], project.root, env)

    def invoke(self, hook_name: str, arg_bag: dict[str, Any] | None = None) -> HookResult:
        """Invoke ``hook_name`` in the current project.

        Raises NoProjectFoundError outside a project and HookFailedError when
        the implementation fails.
        """
        if hook_name not in HOOK_NAMES:
            msg = f'unknown hook {hook_name!r} (hooks: {", ".join(HOOK_NAMES)})'
            raise UnknownHookError(msg)

        if arg_bag is None:
            arg_bag = {}
        arg_bag.setdefault('results', [])

        project = self._project()
        implementation = self.resolve(project, hook_name, arg_bag)
        if implementation is None:
            logger.info('hook_not_implemented', hook=hook_name, project=project.name)
            return HookResult(hook=hook_name, implemented=False, outputs=arg_bag['results'])

        logger.info('invoking_hook', hook=hook_name, project=project.name, _verbose_root=str(project.root))
        implementation(arg_bag)
        logger.info('hook_completed', hook=hook_name, project=project.name)
        return HookResult(hook=hook_name, implemented=True, outputs=arg_bag['results'])


__all__ = ['HOOK_NAMES', 'CommandHook', 'FunctionHook', 'HookInvoker', 'python_hook_name']

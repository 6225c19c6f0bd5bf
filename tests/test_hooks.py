"""Tests for lifecycle hook invocation."""

import textwrap
from pathlib import Path

import pytest
from conftest import ProjectFactory, py_command

from modman.errors import (
    HookFailedError,
    NoProjectFoundError,
    ProjectDescriptorError,
    UnknownHookError,
    UnknownTaskError,
)
from modman.hooks import HOOK_NAMES, HookInvoker, python_hook_name
from modman.settings import Settings


def _write_hooks_module(root: Path, source: str) -> None:
    (root / 'hooks.py').write_text(textwrap.dedent(source))


class TestHookNames:
    """Tests for the lifecycle hook set."""

    def test_hook_set(self) -> None:
        assert HOOK_NAMES == ('build', 'clean', 'clean-all', 'check', 'run')

    def test_python_hook_name(self) -> None:
        assert python_hook_name('clean-all') == 'clean_all'
        assert python_hook_name('build') == 'build'


class TestMissingHooks:
    """A hook the project does not implement succeeds without doing anything."""

    def test_unimplemented_hook_is_noop(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('plain')
        result = HookInvoker(settings, start=root).invoke('clean-all')

        assert result.implemented is False
        assert result.outputs == []

    def test_run_without_tasks_is_noop(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('plain')
        result = HookInvoker(settings, start=root).invoke('run', {'task': 'anything'})
        assert result.implemented is False

    def test_unknown_hook_name(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('plain')
        with pytest.raises(UnknownHookError, match='deploy'):
            HookInvoker(settings, start=root).invoke('deploy')

    def test_outside_project(self, settings: Settings, tmp_path: Path) -> None:
        empty = tmp_path / 'empty'
        empty.mkdir()
        with pytest.raises(NoProjectFoundError):
            HookInvoker(settings, start=empty).invoke('build')


class TestCommandHooks:
    """Tests for hooks declared as command lists in project.yaml."""

    def test_commands_run_in_project_root(self, settings: Settings, make_project: ProjectFactory) -> None:
        code = "import os, pathlib; pathlib.Path('hook.txt').write_text(os.environ['MODMAN_HOOK'])"
        root = make_project('builder', hooks={'build': py_command(code)})

        result = HookInvoker(settings, start=root).invoke('build')

        assert result.implemented is True
        assert (root / 'hook.txt').read_text() == 'build'
        assert result.outputs[0]['status'] == 0

    def test_found_from_subdirectory(self, settings: Settings, make_project: ProjectFactory) -> None:
        code = "import pathlib; pathlib.Path('marker').touch()"
        root = make_project('nested', hooks={'clean': [py_command(code)]})
        subdir = root / 'src' / 'deep'
        subdir.mkdir(parents=True)

        HookInvoker(settings, start=subdir).invoke('clean')

        assert (root / 'marker').exists()

    def test_settings_are_substituted(self, settings: Settings, make_project: ProjectFactory) -> None:
        code = "import sys, pathlib; pathlib.Path('args.txt').write_text(sys.argv[1])"
        root = make_project('subst', hooks={'build': f'{py_command(code)} $MODMAN_BUILD_TYPE'})

        HookInvoker(settings, start=root).invoke('build')

        assert (root / 'args.txt').read_text() == 'release'

    def test_failure_stops_remaining_commands(self, settings: Settings, make_project: ProjectFactory) -> None:
        fail = py_command('import sys; sys.exit(4)')
        touch = py_command("import pathlib; pathlib.Path('after').touch()")
        root = make_project('failing', hooks={'check': [fail, touch]})

        with pytest.raises(HookFailedError) as exc_info:
            HookInvoker(settings, start=root).invoke('check')

        assert exc_info.value.hook == 'check'
        assert exc_info.value.status == 4
        assert not (root / 'after').exists()

    def test_missing_executable(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('missing', hooks={'build': 'definitely-not-a-real-binary-xyz'})
        with pytest.raises(HookFailedError) as exc_info:
            HookInvoker(settings, start=root).invoke('build')
        assert exc_info.value.status == 127

    def test_run_named_task(self, settings: Settings, make_project: ProjectFactory) -> None:
        code = "import os, pathlib; pathlib.Path('task.txt').write_text(os.environ['MODMAN_TASK'])"
        root = make_project('tasks', tasks={'hello': py_command(code)})

        result = HookInvoker(settings, start=root).invoke('run', {'task': 'hello'})

        assert result.implemented is True
        assert (root / 'task.txt').read_text() == 'hello'

    def test_run_unknown_task(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('tasks', tasks={'hello': 'true'})
        with pytest.raises(UnknownTaskError, match='hello'):
            HookInvoker(settings, start=root).invoke('run', {'task': 'bye'})


class TestFunctionHooks:
    """Tests for hooks implemented in a Python hooks module."""

    def test_function_receives_arg_bag(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('pyhooks', hooks_module='hooks.py')
        _write_hooks_module(
            root,
            """
            def build(bag):
                return {'args': bag.get('args')}
            """,
        )

        result = HookInvoker(settings, start=root).invoke('build', {'args': ['-x', 'y']})

        assert result.implemented is True
        assert result.outputs == [{'args': ['-x', 'y']}]

    def test_function_wins_over_commands(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('both', hooks_module='hooks.py', hooks={'clean-all': 'false'})
        _write_hooks_module(
            root,
            """
            def clean_all(bag):
                return 'from-module'
            """,
        )

        result = HookInvoker(settings, start=root).invoke('clean-all')

        assert result.outputs == ['from-module']

    def test_missing_function_falls_back(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('partial', hooks_module='hooks.py')
        _write_hooks_module(root, 'def build(bag):\n    return None\n')

        result = HookInvoker(settings, start=root).invoke('check')

        assert result.implemented is False

    def test_nonzero_return_fails(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('status', hooks_module='hooks.py')
        _write_hooks_module(root, 'def check(bag):\n    return 2\n')

        with pytest.raises(HookFailedError) as exc_info:
            HookInvoker(settings, start=root).invoke('check')
        assert exc_info.value.status == 2

    def test_exception_becomes_failure(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('boom', hooks_module='hooks.py')
        _write_hooks_module(root, "def build(bag):\n    raise RuntimeError('compiler exploded')\n")

        with pytest.raises(HookFailedError, match='compiler exploded') as exc_info:
            HookInvoker(settings, start=root).invoke('build')
        assert exc_info.value.status == 1

    def test_broken_module_is_descriptor_error(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('broken', hooks_module='hooks.py')
        _write_hooks_module(root, 'def build(bag) syntax error\n')

        with pytest.raises(ProjectDescriptorError, match='cannot import hooks module'):
            HookInvoker(settings, start=root).invoke('build')

    def test_module_raising_on_import(self, settings: Settings, make_project: ProjectFactory) -> None:
        root = make_project('raising', hooks_module='hooks.py')
        _write_hooks_module(root, 'import not_a_real_module_xyz\n')

        with pytest.raises(ProjectDescriptorError, match='not_a_real_module_xyz'):
            HookInvoker(settings, start=root).invoke('check')

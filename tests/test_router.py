"""Tests for the command registry and dispatch."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from modman.cli.commands import build_registry
from modman.cli.main import create_parser, exit_status, main, positional_tokens
from modman.cli.router import CommandContext, CommandRegistry, dispatch
from modman.errors import UnknownCommandError, UsageError
from modman.settings import Settings

CLI_COMMANDS = [
    'help',
    'install',
    'uninstall',
    'clear-cache',
    'list-pkgs',
    'env',
    'new-project',
    'new-simple-project',
    'new-c-project',
    'new-exe-project',
    'deps',
    'build',
    'clean',
    'clean-all',
    'test',
    'run',
    'quickbin',
    'save-lockfile',
    'load-lockfile',
    'prune',
    'show-config',
    'update-pkgs',
    'hook',
]


def _context(settings: Settings, registry: CommandRegistry, cwd: Path) -> CommandContext:
    return CommandContext(settings=settings, registry=registry, cwd=cwd)


class TestCommandTable:
    """Tests for the full command table."""

    @pytest.mark.parametrize('name', CLI_COMMANDS)
    def test_every_command_resolves(self, name: str) -> None:
        """Every documented subcommand has a handler."""
        command = build_registry().get(name)
        assert command is not None
        assert callable(command.handler)

    def test_lookup_is_case_sensitive(self) -> None:
        """Lookup is exact-match."""
        assert build_registry().get('Install') is None

    def test_duplicate_registration_rejected(self) -> None:
        """Names are unique within the table."""
        registry = CommandRegistry()
        registry.add('build', lambda context: None, 'build')
        with pytest.raises(ValueError, match='registered twice'):
            registry.add('build', lambda context: None, 'again')


class TestDispatch:
    """Tests for routing positional tokens."""

    def test_no_tokens_runs_help(self, settings: Settings, tmp_path: Path) -> None:
        """Dispatch with zero tokens is help and exits 0."""
        calls = []
        registry = CommandRegistry()
        registry.add('help', lambda context: calls.append('help') or 1, 'help')

        assert dispatch(_context(settings, registry, tmp_path), []) == 0
        assert calls == ['help']

    def test_unknown_command_invokes_nothing(self, settings: Settings, tmp_path: Path) -> None:
        """An unknown first token fails before any handler runs."""
        calls = []
        registry = CommandRegistry()
        registry.add('help', lambda context: calls.append('help'), 'help')
        registry.add('build', lambda context: calls.append('build'), 'build')

        with pytest.raises(UnknownCommandError) as exc_info:
            dispatch(_context(settings, registry, tmp_path), ['frobnicate', 'x'])

        assert calls == []
        assert exc_info.value.name == 'frobnicate'
        assert exc_info.value.available == ['help', 'build']
        assert 'frobnicate' in str(exc_info.value)
        assert 'help, build' in str(exc_info.value)

    def test_arguments_forwarded_in_order(self, settings: Settings, tmp_path: Path) -> None:
        """Remaining tokens reach the handler unchanged."""
        seen = []
        registry = CommandRegistry()
        registry.add('install', lambda context, *targets: seen.extend(targets), 'install')

        assert dispatch(_context(settings, registry, tmp_path), ['install', 'b', 'a', 'c']) == 0
        assert seen == ['b', 'a', 'c']

    def test_handler_status_is_returned(self, settings: Settings, tmp_path: Path) -> None:
        """A handler's integer result becomes the exit status."""
        registry = CommandRegistry()
        registry.add('check', lambda context: 3, 'check')

        assert dispatch(_context(settings, registry, tmp_path), ['check']) == 3

    def test_commands_and_context_are_immutable(self, settings: Settings, tmp_path: Path) -> None:
        registry = CommandRegistry()
        command = registry.add('check', lambda context, *targets: None, 'check', usage='[target...]')
        context = _context(settings, registry, tmp_path)

        with pytest.raises(ValidationError):
            command.summary = 'changed'
        with pytest.raises(ValidationError):
            context.cwd = tmp_path / 'elsewhere'
        assert command.synopsis == 'check [target...]'

    def test_arity_mismatch_is_usage_error(self, settings: Settings, tmp_path: Path) -> None:
        """Wrong argument counts surface as the command's own usage error."""
        calls = []
        registry = CommandRegistry()
        registry.add('run', lambda context, task: calls.append(task), 'run a task', 'task')

        with pytest.raises(UsageError, match='usage: modman run task'):
            dispatch(_context(settings, registry, tmp_path), ['run'])
        with pytest.raises(UsageError):
            dispatch(_context(settings, registry, tmp_path), ['run', 'a', 'b'])
        assert calls == []


class TestMain:
    """Tests for the process entry point."""

    def test_main_without_arguments_prints_help(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """No arguments prints the command list and exits 0."""
        monkeypatch.setenv('MODMAN_TREE', str(tmp_path / 'tree'))
        assert main([]) == 0
        out = capsys.readouterr().out
        for name in CLI_COMMANDS:
            assert name in out

    def test_main_unknown_command(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Unknown commands exit non-zero and name the offender."""
        monkeypatch.setenv('MODMAN_TREE', str(tmp_path / 'tree'))
        assert main(['frobnicate']) == 1
        err = capsys.readouterr().err
        assert 'unknown command: frobnicate' in err
        assert 'install' in err

    def test_main_invalid_environment(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Bad environment values fail before dispatch."""
        monkeypatch.setenv('MODMAN_OFFLINE', 'sometimes')
        assert main(['help']) == 1
        assert 'MODMAN_OFFLINE' in capsys.readouterr().err

    def test_show_config_applies_overrides(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """CLI options win over environment variables."""
        monkeypatch.setenv('MODMAN_BUILD_TYPE', 'debug')
        monkeypatch.setenv('MODMAN_WORKERS', '3')
        assert main(['--build-type', 'develop', '--tree', str(tmp_path), 'show-config']) == 0
        out = capsys.readouterr().out
        assert 'build_type: develop' in out
        assert 'workers: 3' in out
        assert f'tree: {tmp_path}' in out


class TestArgumentSplitting:
    """Tests for separating modman options from command arguments."""

    @pytest.mark.parametrize(
        ('argv', 'expected'),
        [
            ([], []),
            (['-v'], []),
            (['list-pkgs', '-lib'], ['list-pkgs', '-lib']),
            (['hook', 'check', '-k', 'slow'], ['hook', 'check', '-k', 'slow']),
            (['--offline', 'install', 'a', '--tree', 'x'], ['install', 'a', '--tree', 'x']),
        ],
    )
    def test_tokens_after_command_are_passed_through(self, argv: list[str], expected: list[str]) -> None:
        """Everything after the subcommand belongs to the subcommand."""
        assert positional_tokens(create_parser().parse_args(argv)) == expected

    def test_options_before_command_are_parsed(self) -> None:
        namespace = create_parser().parse_args(['--offline', '--workers', '4', 'install', 'a'])
        assert namespace.offline is True
        assert namespace.workers == 4
        assert namespace.tree is None

    def test_option_like_search_term(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """A search term starting with a dash reaches list-pkgs."""
        listing = tmp_path / 'tree' / 'pkgs' / 'packages.yaml'
        listing.parent.mkdir(parents=True)
        listing.write_text('foo-lib: https://example.com/foo-lib.git\nbar: https://example.com/bar.git\n')
        monkeypatch.setenv('MODMAN_TREE', str(tmp_path / 'tree'))

        assert main(['list-pkgs', '-lib']) == 0
        assert capsys.readouterr().out == 'foo-lib\n'


class TestExitStatus:
    """Tests for mapping hook failures to process exit codes."""

    @pytest.mark.parametrize(
        ('status', 'expected'),
        [(5, 5), (1, 1), (0, 1), (-9, 137), (-15, 143)],
    )
    def test_exit_status(self, status: int, expected: int) -> None:
        assert exit_status(status) == expected

"""Tests for project scaffolding and environments."""

from pathlib import Path

import pytest
from conftest import py_command

from modman.errors import ScaffoldError
from modman.hooks import HookInvoker
from modman.project import load_metadata, load_project
from modman.scaffold import PROJECT_BUILDERS, create_env, create_project, module_name
from modman.settings import Settings


class TestCreateProject:
    """Tests for create_project function."""

    @pytest.mark.parametrize('kind', sorted(PROJECT_BUILDERS))
    def test_descriptor_is_valid(self, tmp_path: Path, kind: str) -> None:
        """Every template produces a loadable project."""
        root = create_project(kind, 'demo-app', tmp_path)  # type: ignore[arg-type]

        metadata = load_metadata(root)
        assert metadata.name == 'demo-app'
        assert metadata.dependencies == []

    def test_full_project_layout(self, tmp_path: Path) -> None:
        root = create_project('full', 'demo-app', tmp_path)

        assert (root / 'demo_app' / '__init__.py').is_file()
        assert (root / 'test' / 'test_demo_app.py').is_file()
        assert (root / '.gitignore').is_file()
        metadata = load_metadata(root)
        assert 'check' in metadata.hooks
        assert 'hello' in metadata.tasks

    def test_c_project_uses_compiler_setting(self, tmp_path: Path) -> None:
        root = create_project('c', 'tool', tmp_path)

        assert (root / 'src' / 'tool.c').is_file()
        assert any('$MODMAN_CC' in command for command in load_metadata(root).hooks['build'])

    def test_simple_project_module(self, tmp_path: Path) -> None:
        root = create_project('simple', 'tiny', tmp_path)
        assert 'hello from tiny' in (root / 'tiny.py').read_text()

    def test_generated_task_runs(self, tmp_path: Path, settings: Settings) -> None:
        """The generated package is importable by its own task."""
        root = create_project('full', 'greeter', tmp_path)
        project = load_project(root)
        project.metadata.tasks['hello'] = [
            py_command("import greeter, pathlib; pathlib.Path('out.txt').write_text(greeter.hello())"),
        ]

        HookInvoker(settings, project=project).invoke('run', {'task': 'hello'})

        assert (root / 'out.txt').read_text() == 'hello from greeter'

    def test_existing_directory(self, tmp_path: Path) -> None:
        (tmp_path / 'taken').mkdir()
        with pytest.raises(ScaffoldError, match='already exists'):
            create_project('simple', 'taken', tmp_path)

    @pytest.mark.parametrize('name', ['1abc', 'has space', '../escape', ''])
    def test_invalid_names(self, tmp_path: Path, name: str) -> None:
        with pytest.raises(ScaffoldError, match='invalid project name'):
            create_project('simple', name, tmp_path)

    def test_module_name(self) -> None:
        assert module_name('my-lib') == 'my_lib'


class TestCreateEnv:
    """Tests for create_env function."""

    def test_env_layout(self, tmp_path: Path) -> None:
        root = create_env('sandbox', tmp_path)

        assert (root / 'tree').is_dir()
        assert (root / 'bin').is_dir()
        activate = (root / 'activate').read_text()
        assert f'MODMAN_TREE="{root / "tree"}"' in activate
        assert str(root / 'bin') in activate

    def test_env_existing(self, tmp_path: Path) -> None:
        create_env('sandbox', tmp_path)
        with pytest.raises(ScaffoldError):
            create_env('sandbox', tmp_path)

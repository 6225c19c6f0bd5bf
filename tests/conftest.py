import shlex
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from modman.logging import configure_logging
from modman.project import PROJECT_FILENAME
from modman.settings import Settings

ProjectFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def _quiet_logging() -> None:
    configure_logging(verbose=False)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings.from_environ(
        {},
        tree=tmp_path / 'tree',
        cache=tmp_path / 'cache',
        workers=2,
    )


def write_descriptor(root: Path, data: dict[str, Any]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / PROJECT_FILENAME).write_text(yaml.safe_dump(data, sort_keys=False))
    return root


@pytest.fixture
def make_project(tmp_path: Path) -> ProjectFactory:
    """Create a project directory holding a project.yaml."""

    def _make(name: str, directory: str | None = None, **fields: Any) -> Path:
        root = tmp_path / 'projects' / (directory or name)
        return write_descriptor(root, {'name': name, **fields})

    return _make


def py_command(code: str) -> str:
    """A hook command running ``code`` with the current interpreter."""
    return f'{shlex.quote(sys.executable)} -c {shlex.quote(code)}'

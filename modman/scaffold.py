"""Project scaffolding and local environments."""

import re
from collections.abc import Callable
from pathlib import Path
from typing import Literal

import yaml

from modman.errors import ScaffoldError
from modman.fsutil import write_text_file
from modman.logging import get_logger
from modman.project import PROJECT_FILENAME

logger = get_logger(__name__)

ProjectKind = Literal['full', 'simple', 'c', 'exe']

PROJECT_NAME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9_-]*$')

GITIGNORE = """\
build/
__pycache__/
*.pyc
*.o
*.so
"""

PACKAGE_INIT = '''\
"""{name}."""

__version__ = '0.0.0'


def hello() -> str:
    return 'hello from {name}'
'''

PACKAGE_TEST = """\
from {module} import hello


def test_hello() -> None:
    assert hello() == 'hello from {name}'
"""

SIMPLE_MODULE = '''\
"""{name}."""


def main() -> None:
    print('hello from {name}')


if __name__ == '__main__':
    main()
'''

C_SOURCE = """\
#include <stdio.h>

int main(void) {{
    printf("hello from {name}\\n");
    return 0;
}}
"""

EXE_MAIN = '''\
"""Entry point for {name}."""

import sys


def main(argv: list[str]) -> int:
    print('hello from {name}', *argv)
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
'''

ACTIVATE = """\
# source this file to use the {name} environment
export MODMAN_TREE="{tree}"
export PATH="{bin}:$PATH"
"""


def module_name(name: str) -> str:
    """Python module name for a project name."""
    return name.replace('-', '_')


def _descriptor(name: str, **sections: object) -> str:
    data: dict[str, object] = {'name': name, 'description': '', 'version': '0.0.0', 'dependencies': []}
    data.update({key: value for key, value in sections.items() if value})
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def _full_project(root: Path, name: str) -> None:
    module = module_name(name)
    write_text_file(
        root / PROJECT_FILENAME,
        _descriptor(
            name,
            hooks={
                'check': ['python -m pytest test'],
                'clean': ['rm -rf $MODMAN_BUILDPATH'],
            },
            tasks={'hello': [f'python -c "import {module}; print({module}.hello())"']},
        ),
    )
    write_text_file(root / module / '__init__.py', PACKAGE_INIT.format(name=name))
    write_text_file(root / 'test' / f'test_{module}.py', PACKAGE_TEST.format(name=name, module=module))
    write_text_file(root / '.gitignore', GITIGNORE)


def _simple_project(root: Path, name: str) -> None:
    write_text_file(root / PROJECT_FILENAME, _descriptor(name))
    write_text_file(root / f'{module_name(name)}.py', SIMPLE_MODULE.format(name=name))


def _c_project(root: Path, name: str) -> None:
    write_text_file(
        root / PROJECT_FILENAME,
        _descriptor(
            name,
            hooks={
                'build': [
                    'mkdir -p $MODMAN_BUILDPATH',
                    f'$MODMAN_CC -O2 -o $MODMAN_BUILDPATH/{name} src/{name}.c',
                ],
                'check': [f'$MODMAN_BUILDPATH/{name}'],
                'clean': ['rm -rf $MODMAN_BUILDPATH'],
            },
        ),
    )
    write_text_file(root / 'src' / f'{name}.c', C_SOURCE.format(name=name))
    write_text_file(root / '.gitignore', GITIGNORE)


def _exe_project(root: Path, name: str) -> None:
    write_text_file(
        root / PROJECT_FILENAME,
        _descriptor(
            name,
            hooks={'clean': ['rm -rf $MODMAN_BUILDPATH']},
            tasks={'quickbin': [f'modman quickbin main.py $MODMAN_BUILDPATH/{name}']},
        ),
    )
    write_text_file(root / 'main.py', EXE_MAIN.format(name=name))
    write_text_file(root / '.gitignore', GITIGNORE)


PROJECT_BUILDERS: dict[str, Callable[[Path, str], None]] = {
    'full': _full_project,
    'simple': _simple_project,
    'c': _c_project,
    'exe': _exe_project,
}


def _prepare_directory(name: str, parent: Path | None) -> Path:
    if not PROJECT_NAME_PATTERN.match(name):
        msg = f'invalid project name {name!r}: use letters, digits, "-" and "_", starting with a letter'
        raise ScaffoldError(msg)
    root = (parent or Path.cwd()) / name
    if root.exists():
        msg = f'{root} already exists'
        raise ScaffoldError(msg)
    return root


def create_project(kind: ProjectKind, name: str, parent: Path | None = None) -> Path:
    """Create a new ``kind`` project called ``name`` under ``parent``."""
    root = _prepare_directory(name, parent)
    builder = PROJECT_BUILDERS[kind]
    root.mkdir(parents=True)
    builder(root, name)
    logger.info('project_created', project=name, kind=kind, path=str(root))
    return root


def create_env(name: str, parent: Path | None = None) -> Path:
    """Create a self-contained environment with its own install tree."""
    root = _prepare_directory(name, parent).resolve()
    tree = root / 'tree'
    bin_dir = root / 'bin'
    tree.mkdir(parents=True)
    bin_dir.mkdir()
    write_text_file(root / 'activate', ACTIVATE.format(name=name, tree=tree, bin=bin_dir))
    logger.info('environment_created', env=name, path=str(root))
    return root


__all__ = ['PROJECT_BUILDERS', 'ProjectKind', 'create_env', 'create_project', 'module_name']

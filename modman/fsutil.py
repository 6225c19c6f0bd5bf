"""Filesystem helpers for the install tree."""

import shutil
from pathlib import Path

from modman.logging import get_logger

logger = get_logger(__name__)

COPY_IGNORE = ('.git', '.hg', '__pycache__', '*.pyc', '.pytest_cache')


def remove_target(target: Path) -> None:
    """Remove a target file or directory (symlink or copy)."""
    if target.is_symlink():
        target.unlink()
    elif target.is_dir():
        shutil.rmtree(target)
    elif target.is_file():
        target.unlink()


def replace_tree(source: Path, target: Path) -> None:
    """Copy ``source`` to ``target``, replacing whatever is there.

    Version-control metadata and bytecode caches are not copied.
    """
    if not source.is_dir():
        msg = f'Source does not exist: {source}'
        raise FileNotFoundError(msg)

    if target.exists() or target.is_symlink():
        logger.debug('removing_existing_target', _debug_target=str(target))
        remove_target(target)

    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, target, ignore=shutil.ignore_patterns(*COPY_IGNORE))
    logger.debug('copied_tree', source=str(source), target=str(target))


def write_text_file(path: Path, content: str, *, executable: bool = False) -> None:
    """Write a text file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if executable:
        path.chmod(path.stat().st_mode | 0o111)

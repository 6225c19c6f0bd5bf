"""Project descriptor discovery and loading."""

import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Any

import yaml
from pydantic import ValidationError

from modman.errors import NoProjectFoundError, ProjectDescriptorError
from modman.logging import get_logger
from modman.models import ProjectMetadata

logger = get_logger(__name__)

PROJECT_FILENAME = 'project.yaml'


def find_project_root(start: Path | None = None) -> Path | None:
    """Find the nearest directory at or above ``start`` holding a descriptor."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / PROJECT_FILENAME).is_file():
            return candidate
    return None


def _load_yaml_descriptor(descriptor: Path) -> dict[str, Any]:
    logger.debug('loading_project_descriptor', descriptor=str(descriptor))
    try:
        with descriptor.open() as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        msg = f'failed to parse YAML in {descriptor}: {exc}'
        raise ProjectDescriptorError(msg) from exc

    if not isinstance(data, dict):
        msg = f'project descriptor root must be a mapping in {descriptor}'
        raise ProjectDescriptorError(msg)

    return data


def load_metadata(root: Path) -> ProjectMetadata:
    """Load and validate ``project.yaml`` from a project root."""
    descriptor = root / PROJECT_FILENAME
    if not descriptor.is_file():
        msg = f'no {PROJECT_FILENAME} in {root}'
        raise NoProjectFoundError(msg)

    data = _load_yaml_descriptor(descriptor)
    try:
        return ProjectMetadata.model_validate(data)
    except ValidationError as exc:
        logger.error('project_descriptor_invalid', descriptor=str(descriptor), errors=exc.errors())
        msg = f'invalid project descriptor {descriptor}'
        raise ProjectDescriptorError(msg) from exc


class Project:
    """A project root together with its descriptor."""

    def __init__(self, root: Path, metadata: ProjectMetadata) -> None:
        self.root = root
        self.metadata = metadata
        self._hooks_module: ModuleType | None = None

    @property
    def name(self) -> str:
        return self.metadata.name

    def __repr__(self) -> str:
        return f'Project(name={self.name!r}, root={str(self.root)!r})'

    def hooks_module(self) -> ModuleType | None:
        """Import the project's Python hooks file, if it declares one."""
        if self.metadata.hooks_module is None:
            return None
        if self._hooks_module is not None:
            return self._hooks_module

        path = (self.root / self.metadata.hooks_module).resolve()
        if not path.is_file():
            msg = f'hooks module not found: {path}'
            raise ProjectDescriptorError(msg)

        module_name = f'modman_project_hooks_{self.name.replace("-", "_").replace(".", "_")}'
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            msg = f'cannot import hooks module {path}'
            raise ProjectDescriptorError(msg)
        module = importlib.util.module_from_spec(spec)
        logger.debug('loading_hooks_module', path=str(path))
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            msg = f'cannot import hooks module {path}: {exc}'
            raise ProjectDescriptorError(msg) from exc
        self._hooks_module = module
        return module


def load_project(start: Path | None = None) -> Project:
    """Locate and load the project enclosing ``start`` (default: cwd)."""
    root = find_project_root(start)
    if root is None:
        where = (start or Path.cwd()).resolve()
        msg = f'no {PROJECT_FILENAME} found in {where} or any parent directory'
        raise NoProjectFoundError(msg)
    return Project(root, load_metadata(root))


__all__ = [
    'PROJECT_FILENAME',
    'Project',
    'find_project_root',
    'load_metadata',
    'load_project',
]

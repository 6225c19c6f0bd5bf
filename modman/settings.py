"""Configuration context resolved from the environment."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from modman.errors import ConfigError

DEFAULT_PKGLIST_URL = 'https://github.com/modman-dev/pkgs.git'

TRUE_VALUES = frozenset({'1', 'true', 'yes', 'on'})
FALSE_VALUES = frozenset({'0', 'false', 'no', 'off', ''})

# field name -> environment variable
ENVIRONMENT_VARIABLES = {
    'buildpath': 'MODMAN_BUILDPATH',
    'build_type': 'MODMAN_BUILD_TYPE',
    'git': 'MODMAN_GIT',
    'tar': 'MODMAN_TAR',
    'cc': 'MODMAN_CC',
    'pkglist': 'MODMAN_PKGLIST',
    'offline': 'MODMAN_OFFLINE',
    'toolchain': 'MODMAN_TOOLCHAIN',
    'verbose': 'VERBOSE',
    'workers': 'MODMAN_WORKERS',
    'tree': 'MODMAN_TREE',
    'cache': 'MODMAN_CACHE',
}

BOOLEAN_FIELDS = frozenset({'offline', 'verbose'})


def _default_workers() -> int:
    return os.cpu_count() or 1


def parse_bool(name: str, raw: str) -> bool:
    """Interpret an environment flag."""
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    msg = f'invalid boolean for {name}: {raw!r}'
    raise ConfigError(msg)


class Settings(BaseModel):
    """Read-only settings shared by every command of one process run."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    buildpath: Path = Path('build')
    build_type: Literal['release', 'debug', 'develop'] = 'release'
    git: str = 'git'
    tar: str = 'tar'
    cc: str = 'cc'
    pkglist: str = DEFAULT_PKGLIST_URL
    offline: bool = False
    toolchain: str | None = None
    verbose: bool = False
    workers: int = _default_workers()
    tree: Path = Path('~/.local/share/modman/tree')
    cache: Path = Path('~/.cache/modman')

    @field_validator('workers')
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensure the worker count is positive."""
        if v < 1:
            msg = 'workers must be a positive integer'
            raise ValueError(msg)
        return v

    @field_validator('tree', 'cache')
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        """Expand ``~`` in directory settings."""
        return v.expanduser()

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> 'Settings':
        """Build settings from environment variables layered over defaults.

        Keyword overrides (typically CLI options) win over the environment;
        ``None`` overrides are ignored.
        """
        if environ is None:
            environ = os.environ

        values: dict[str, Any] = {}
        for field, variable in ENVIRONMENT_VARIABLES.items():
            raw = environ.get(variable)
            if raw is None:
                continue
            if field in BOOLEAN_FIELDS:
                values[field] = parse_bool(variable, raw)
            elif raw.strip():
                values[field] = raw.strip()

        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            msg = f'invalid configuration: {exc}'
            raise ConfigError(msg) from exc

    @property
    def manifest_dir(self) -> Path:
        """Directory holding one manifest per installed bundle."""
        return self.tree / '.manifests'

    @property
    def listing_path(self) -> Path:
        """Location of the installed package listing."""
        return self.tree / 'pkgs' / 'packages.yaml'

    def hook_environment(self) -> dict[str, str]:
        """Variables exported to hook subprocesses."""
        env = {
            'MODMAN_BUILDPATH': str(self.buildpath),
            'MODMAN_BUILD_TYPE': self.build_type,
            'MODMAN_CC': self.cc,
            'MODMAN_WORKERS': str(self.workers),
            'MODMAN_TREE': str(self.tree),
        }
        if self.toolchain:
            env['MODMAN_TOOLCHAIN'] = self.toolchain
        return env

    def as_display_dict(self) -> dict[str, Any]:
        """Plain-data view used by ``show-config``."""
        return {
            key: str(value) if isinstance(value, Path) else value
            for key, value in self.model_dump().items()
        }


__all__ = ['ENVIRONMENT_VARIABLES', 'Settings', 'parse_bool']

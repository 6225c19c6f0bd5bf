"""Pydantic models for modman."""

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SourceKind = Literal['file', 'git', 'tar', 'registry']

NAME_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]*$')


def _validate_bundle_name(v: str) -> str:
    v = v.strip()
    if not NAME_PATTERN.match(v):
        msg = f'invalid bundle name: {v!r}'
        raise ValueError(msg)
    return v


class BundleSource(BaseModel):
    """Where a bundle comes from and how it is pinned."""

    kind: SourceKind
    url: str
    tag: str | None = None
    name: str | None = None

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that the locator is not empty."""
        if not v.strip():
            msg = 'Source locator cannot be empty'
            raise ValueError(msg)
        return v.strip()

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        """Validate explicit bundle names."""
        if v is None:
            return v
        return _validate_bundle_name(v)

    def __str__(self) -> str:
        text = f'{self.kind}::{self.url}'
        if self.tag:
            text = f'{text}@{self.tag}'
        return text


class ListingEntry(BaseModel):
    """A package listing entry: where a nickname is fetched from."""

    model_config = ConfigDict(extra='ignore')

    url: str
    tag: str | None = None


class LockRecord(BaseModel):
    """One replayable lockfile entry."""

    model_config = ConfigDict(extra='forbid')

    name: str
    type: SourceKind
    url: str
    tag: str | None = None
    auto_remove: bool = False

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the bundle name."""
        return _validate_bundle_name(v)

    def to_source(self) -> BundleSource:
        """Turn the record back into an installable source."""
        return BundleSource(kind=self.type, url=self.url, tag=self.tag, name=self.name)


class InstalledBundle(BaseModel):
    """Manifest written for every bundle in the install tree."""

    name: str
    source: BundleSource
    dependencies: list[str] = Field(default_factory=list)
    auto_remove: bool = False
    path: Path

    def to_lock_record(self) -> LockRecord:
        """Describe how to re-obtain exactly this bundle."""
        return LockRecord(
            name=self.name,
            type=self.source.kind,
            url=self.source.url,
            tag=self.source.tag,
            auto_remove=self.auto_remove,
        )


class ProjectMetadata(BaseModel):
    """Contents of a ``project.yaml`` descriptor."""

    model_config = ConfigDict(extra='forbid')

    name: str
    description: str = ''
    version: str = '0.0.0'
    dependencies: list[str] = Field(default_factory=list)
    hooks: dict[str, list[str]] = Field(default_factory=dict)
    tasks: dict[str, list[str]] = Field(default_factory=dict)
    hooks_module: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the bundle name."""
        return _validate_bundle_name(v)

    @field_validator('hooks', 'tasks', mode='before')
    @classmethod
    def normalize_commands(cls, v: Any) -> Any:
        """Allow a single command string where a list is expected."""
        if isinstance(v, dict):
            return {key: [value] if isinstance(value, str) else value for key, value in v.items()}
        return v


class HookResult(BaseModel):
    """Outcome of one lifecycle hook invocation."""

    hook: str
    implemented: bool
    outputs: list[Any] = Field(default_factory=list)

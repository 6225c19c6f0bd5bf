"""Package listing index: nicknames mapped to installable sources."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from modman.errors import MissingListingError, UnknownPackageError
from modman.logging import get_logger
from modman.models import BundleSource, ListingEntry
from modman.settings import Settings

logger = get_logger(__name__)

LISTING_BUNDLE_NAME = 'pkgs'


def _coerce_entry(nickname: str, raw: Any) -> ListingEntry:
    if isinstance(raw, str):
        return ListingEntry(url=raw)
    if isinstance(raw, dict):
        return ListingEntry.model_validate(raw)
    msg = f'listing entry {nickname!r} must be a URL or a mapping'
    raise ValueError(msg)


class PackageIndex:
    """In-memory, read-only view of the installed package listing."""

    def __init__(self, packages: dict[str, ListingEntry]) -> None:
        self.packages = packages

    @classmethod
    def from_file(cls, path: Path) -> 'PackageIndex':
        """Load the listing from ``path``."""
        if not path.is_file():
            msg = f'package listing not found at {path}; run `modman update-pkgs` to install it'
            raise MissingListingError(msg)

        logger.debug('loading_package_listing', path=str(path))
        try:
            with path.open() as fh:
                data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            msg = f'failed to parse package listing {path}: {exc}'
            raise MissingListingError(msg) from exc

        # a listing may nest its entries under a top-level 'packages' key
        if isinstance(data, dict) and isinstance(data.get('packages'), dict):
            data = data['packages']
        if not isinstance(data, dict):
            msg = f'package listing root must be a mapping in {path}'
            raise MissingListingError(msg)

        try:
            packages = {str(nick): _coerce_entry(str(nick), raw) for nick, raw in data.items()}
        except (ValueError, ValidationError) as exc:
            msg = f'invalid package listing {path}: {exc}'
            raise MissingListingError(msg) from exc
        return cls(packages)

    @classmethod
    def load(cls, settings: Settings) -> 'PackageIndex':
        """Load the listing installed in the configured tree."""
        return cls.from_file(settings.listing_path)

    def search(self, term: str | None = None) -> list[str]:
        """Nicknames containing ``term`` (all when ``None``), sorted ascending."""
        names = self.packages if term is None else (n for n in self.packages if term in n)
        return sorted(names)

    def resolve(self, nickname: str) -> ListingEntry:
        """Look up the source behind ``nickname``."""
        try:
            return self.packages[nickname]
        except KeyError:
            msg = f'unknown package {nickname!r}; try `modman list-pkgs`'
            raise UnknownPackageError(msg) from None

    def resolve_source(self, source: BundleSource) -> BundleSource:
        """Turn a registry source into the git source it names."""
        entry = self.resolve(source.url)
        return BundleSource(
            kind='git',
            url=entry.url,
            tag=source.tag or entry.tag,
            name=source.name or source.url,
        )


__all__ = ['LISTING_BUNDLE_NAME', 'PackageIndex']

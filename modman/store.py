"""The bundle store: the set of bundles installed in the tree."""

import shutil
from pathlib import Path

import yaml
from pydantic import ValidationError

from modman.errors import BundleNotInstalledError, FetchError, ModmanError
from modman.fetch import Fetcher
from modman.fsutil import remove_target, replace_tree
from modman.hooks import HookInvoker
from modman.listing import PackageIndex
from modman.logging import get_logger
from modman.models import BundleSource, InstalledBundle, ProjectMetadata
from modman.parsing import default_bundle_name, parse_source
from modman.project import PROJECT_FILENAME, Project, load_metadata
from modman.settings import Settings

logger = get_logger(__name__)


def as_source(source: BundleSource | str) -> BundleSource:
    """Accept either a parsed source or a source string."""
    if isinstance(source, BundleSource):
        return source
    try:
        return parse_source(source)
    except ValueError as exc:
        raise FetchError(str(exc)) from exc


class BundleStore:
    """Installs, lists and removes bundles under ``settings.tree``."""

    def __init__(self, settings: Settings, fetcher: Fetcher | None = None) -> None:
        self.settings = settings
        self.fetcher = fetcher or Fetcher(settings)

    @property
    def tree(self) -> Path:
        return self.settings.tree

    def manifest_path(self, name: str) -> Path:
        return self.settings.manifest_dir / f'{name}.yaml'

    def bundle_path(self, name: str) -> Path:
        return self.tree / name

    def is_installed(self, name: str) -> bool:
        return self.manifest_path(name).is_file()

    def get(self, name: str) -> InstalledBundle | None:
        """Read the manifest of ``name`` if it is installed."""
        path = self.manifest_path(name)
        if not path.is_file():
            return None
        try:
            with path.open() as fh:
                return InstalledBundle.model_validate(yaml.safe_load(fh) or {})
        except (yaml.YAMLError, ValidationError) as exc:
            msg = f'corrupt manifest {path}: {exc}'
            raise ModmanError(msg) from exc

    def list_installed(self) -> list[InstalledBundle]:
        """Every installed bundle, sorted by name."""
        manifest_dir = self.settings.manifest_dir
        if not manifest_dir.is_dir():
            return []
        bundles = [self.get(path.stem) for path in manifest_dir.glob('*.yaml')]
        return sorted((b for b in bundles if b is not None), key=lambda b: b.name)

    def _write_manifest(self, bundle: InstalledBundle) -> None:
        path = self.manifest_path(bundle.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w') as fh:
            yaml.safe_dump(bundle.model_dump(mode='json'), fh, sort_keys=True)

    def _resolve_registry(self, source: BundleSource) -> BundleSource:
        if source.kind != 'registry':
            return source
        resolved = PackageIndex.load(self.settings).resolve_source(source)
        logger.debug('resolved_registry_source', nickname=source.url, url=resolved.url)
        return resolved

    def install(
        self,
        source: BundleSource | str,
        *,
        force_update: bool = False,
        no_deps: bool = False,
        auto_remove: bool = False,
        name: str | None = None,
        _in_progress: frozenset[str] = frozenset(),
    ) -> InstalledBundle:
        """Install one bundle and, unless ``no_deps``, its dependencies.

        An installed bundle is left alone unless ``force_update`` is set.
        """
        source = self._resolve_registry(as_source(source))
        if name:
            source = source.model_copy(update={'name': name})

        if source.name and not force_update:
            existing = self.get(source.name)
            if existing is not None:
                logger.info('bundle_already_installed', bundle=source.name)
                return existing

        logger.info('installing_bundle', source=str(source), force_update=force_update, no_deps=no_deps)
        fetched = self.fetcher.fetch(source, force_update=force_update)

        metadata: ProjectMetadata | None = None
        if (fetched.path / PROJECT_FILENAME).is_file():
            metadata = load_metadata(fetched.path)

        bundle_name = source.name or (metadata.name if metadata else default_bundle_name(source))
        if bundle_name in _in_progress:
            logger.warning('dependency_cycle', bundle=bundle_name)
            return InstalledBundle(name=bundle_name, source=fetched.source, path=self.bundle_path(bundle_name))
        existing = self.get(bundle_name)
        if existing is not None and not force_update:
            logger.info('bundle_already_installed', bundle=bundle_name)
            return existing
        if existing is not None:
            # an explicit install must not become prunable
            auto_remove = auto_remove and existing.auto_remove

        dependencies = self._install_dependencies(
            metadata,
            no_deps=no_deps,
            in_progress=_in_progress | {bundle_name},
        )

        if metadata is not None:
            HookInvoker(self.settings, project=Project(fetched.path, metadata)).invoke('build')

        destination = self.bundle_path(bundle_name)
        replace_tree(fetched.path, destination)

        bundle = InstalledBundle(
            name=bundle_name,
            source=fetched.source.model_copy(update={'name': bundle_name}),
            dependencies=dependencies,
            auto_remove=auto_remove,
            path=destination,
        )
        self._write_manifest(bundle)
        logger.info('bundle_installed', bundle=bundle_name, _verbose_path=str(destination))
        return bundle

    def _install_dependencies(
        self,
        metadata: ProjectMetadata | None,
        *,
        no_deps: bool,
        in_progress: frozenset[str],
    ) -> list[str]:
        if metadata is None:
            return []

        names: list[str] = []
        for raw in metadata.dependencies:
            dependency = as_source(raw)
            guessed = dependency.name or default_bundle_name(dependency)
            if no_deps or guessed in in_progress:
                names.append(guessed)
                continue
            logger.debug('installing_dependency', dependency=raw, parent=metadata.name)
            installed = self.install(
                dependency,
                auto_remove=True,
                _in_progress=in_progress,
            )
            names.append(installed.name)
        return sorted(set(names))

    def uninstall(self, name: str) -> None:
        """Remove one bundle; removing a bundle that is not installed is an error."""
        if not self.is_installed(name):
            msg = f'bundle {name!r} is not installed'
            raise BundleNotInstalledError(msg)

        remove_target(self.bundle_path(name))
        self.manifest_path(name).unlink()
        logger.info('bundle_uninstalled', bundle=name)

    def prune(self) -> list[str]:
        """Remove dependency-only bundles nothing depends on any more."""
        removed: list[str] = []
        while True:
            bundles = self.list_installed()
            needed = {dep for bundle in bundles for dep in bundle.dependencies}
            orphans = [b.name for b in bundles if b.auto_remove and b.name not in needed]
            if not orphans:
                break
            for orphan in orphans:
                self.uninstall(orphan)
                removed.append(orphan)
        logger.info('prune_completed', removed=removed)
        return removed

    def clear_cache(self) -> None:
        """Delete every cached fetch."""
        cache = self.settings.cache
        if cache.exists():
            shutil.rmtree(cache)
            logger.info('cache_cleared', cache=str(cache))
        else:
            logger.info('cache_already_empty', cache=str(cache))


__all__ = ['BundleStore', 'as_source']

"""Commands operating on the installed bundle set and the package listing."""

from modman.cli.router import CommandContext, CommandRegistry
from modman.listing import LISTING_BUNDLE_NAME, PackageIndex
from modman.logging import get_logger

from . import _shared

logger = get_logger(__name__)

CURRENT_PROJECT_SOURCE = 'file::.'


def _install(context: CommandContext, *targets: str) -> None:
    store = _shared.open_store(context)
    if not targets:
        store.install(CURRENT_PROJECT_SOURCE, force_update=True, no_deps=True)
        return
    for target in targets:
        store.install(target, force_update=True)


def _uninstall(context: CommandContext, *targets: str) -> None:
    store = _shared.open_store(context)
    if not targets:
        targets = (_shared.current_project(context).name,)
    for target in targets:
        store.uninstall(target)


def _deps(context: CommandContext) -> None:
    project = _shared.current_project(context)
    store = _shared.open_store(context)
    logger.info('installing_project_dependencies', project=project.name, count=len(project.metadata.dependencies))
    for dependency in project.metadata.dependencies:
        store.install(dependency)


def _clear_cache(context: CommandContext) -> None:
    _shared.open_store(context).clear_cache()


def _prune(context: CommandContext) -> None:
    _shared.write_lines(_shared.open_store(context).prune())


def _update_pkgs(context: CommandContext) -> None:
    store = _shared.open_store(context)
    store.install(context.settings.pkglist, force_update=True, no_deps=True, name=LISTING_BUNDLE_NAME)


def _list_pkgs(context: CommandContext, search: str | None = None) -> None:
    index = PackageIndex.load(context.settings)
    _shared.write_lines(index.search(search))


def _list_installed(context: CommandContext) -> None:
    bundles = _shared.open_store(context).list_installed()
    _shared.write_lines(f'{bundle.name} {bundle.source}' for bundle in bundles)


def register(registry: CommandRegistry) -> None:
    """Register the bundle commands."""
    registry.add('install', _install, 'Install bundles, or the current project with no arguments', '[targets...]')
    registry.add('uninstall', _uninstall, 'Remove bundles, or the current project with no arguments', '[targets...]')
    registry.add('deps', _deps, 'Install the dependencies of the current project')
    registry.add('clear-cache', _clear_cache, 'Delete cached repositories and archives')
    registry.add('prune', _prune, 'Remove dependency bundles nothing depends on')
    registry.add('update-pkgs', _update_pkgs, 'Install or refresh the package listing')
    registry.add('list-pkgs', _list_pkgs, 'List package nicknames, optionally filtered', '[search]')
    registry.add('list-installed', _list_installed, 'List installed bundles and their sources')

"""Obtain bundle sources with the configured git and tar tools."""

import hashlib
import re
import shutil
import subprocess
import tempfile
from pathlib import Path

from pydantic import BaseModel

from modman.errors import FetchError
from modman.logging import get_logger
from modman.models import BundleSource
from modman.parsing import default_bundle_name
from modman.settings import Settings

logger = get_logger(__name__)


class FetchedBundle(BaseModel):
    """A bundle source materialized on disk."""

    path: Path
    source: BundleSource


def is_immutable_reference(source: BundleSource) -> bool:
    """Check if a source is pinned to something that never moves."""
    if source.kind != 'git' or not source.tag:
        return False
    # full commit hash
    if re.match(r'^[a-f0-9]{40}$', source.tag):
        return True
    # semver-like release tag
    return bool(re.match(r'^v?\d+\.\d+\.\d+', source.tag))


def cache_dir_for(settings: Settings, source: BundleSource) -> Path:
    """Predictable cache location keyed by the source locator."""
    spec_hash = hashlib.sha256(f'{source.kind}::{source.url}'.encode()).hexdigest()[:8]
    return settings.cache / source.kind / f'{default_bundle_name(source)}_{spec_hash}'


class Fetcher:
    """Materializes file, git and tar sources."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _run(self, cmd: list[str], *, cwd: Path | None = None) -> str:
        logger.debug('running_command', _debug_command=' '.join(cmd))
        try:
            result = subprocess.run(  # noqa: S603 - tools come from settings
                cmd,
                capture_output=True,
                text=True,
                check=True,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            msg = f'tool not found: {cmd[0]}'
            raise FetchError(msg) from e
        except subprocess.CalledProcessError as e:
            logger.error('command_failed', command=' '.join(cmd), stderr=e.stderr)
            msg = f'{cmd[0]} exited with status {e.returncode}: {(e.stderr or "").strip()}'
            raise FetchError(msg) from e
        return result.stdout

    def fetch(self, source: BundleSource, *, force_update: bool = False) -> FetchedBundle:
        """Make ``source`` available locally and report its resolved pin."""
        if source.kind == 'file':
            return self.fetch_local(source)
        if source.kind == 'git':
            return self.fetch_git(source, force_update=force_update)
        if source.kind == 'tar':
            return self.fetch_archive(source, force_update=force_update)
        msg = f'registry source {source.url} must be resolved before fetching'
        raise FetchError(msg)

    def fetch_local(self, source: BundleSource) -> FetchedBundle:
        path = Path(source.url).expanduser().resolve()
        if not path.is_dir():
            msg = f'Local path does not exist: {path}'
            raise FetchError(msg)
        resolved = source.model_copy(update={'url': str(path)})
        logger.debug('resolved_local_source', path=str(path))
        return FetchedBundle(path=path, source=resolved)

    def fetch_git(self, source: BundleSource, *, force_update: bool = False) -> FetchedBundle:
        git = self.settings.git
        cache_dir = cache_dir_for(self.settings, source)
        cached = (cache_dir / '.git').exists()

        if not cached:
            if self.settings.offline:
                msg = f'{source.url} is not cached and offline mode is enabled'
                raise FetchError(msg)
            logger.info('cloning_repository', url=source.url, _verbose_cache_dir=str(cache_dir))
            if cache_dir.exists():
                shutil.rmtree(cache_dir)
            cache_dir.parent.mkdir(parents=True, exist_ok=True)
            self._run([git, 'clone', '--quiet', source.url, str(cache_dir)])
        elif self.settings.offline:
            logger.info('using_cached_repository', url=source.url, reason='offline')
        elif force_update or not is_immutable_reference(source):
            logger.info('updating_repository', url=source.url, _verbose_cache_dir=str(cache_dir))
            self._run([git, 'fetch', '--quiet', '--tags', 'origin'], cwd=cache_dir)
        else:
            logger.info('using_cached_repository', url=source.url, reason='immutable_reference')

        target = self._checkout_target(cache_dir, source.tag)
        self._run([git, 'checkout', '--quiet', '--detach', target], cwd=cache_dir)
        commit = self._run([git, 'rev-parse', 'HEAD'], cwd=cache_dir).strip()

        resolved = source.model_copy(update={'tag': commit})
        return FetchedBundle(path=cache_dir, source=resolved)

    def _ref_exists(self, ref: str, cache_dir: Path) -> bool:
        try:
            result = subprocess.run(  # noqa: S603 - tools come from settings
                [self.settings.git, 'rev-parse', '--verify', '--quiet', f'{ref}^{{commit}}'],
                capture_output=True,
                check=False,
                cwd=cache_dir,
            )
        except FileNotFoundError:
            return False
        return result.returncode == 0

    def _checkout_target(self, cache_dir: Path, tag: str | None) -> str:
        """Branch pins follow the remote; tags and commits are used as given."""
        if not tag:
            return 'origin/HEAD'
        remote_ref = f'origin/{tag}'
        if self._ref_exists(remote_ref, cache_dir):
            return remote_ref
        return tag

    def _extract(self, archive: Path, cache_dir: Path) -> None:
        cache_dir.parent.mkdir(parents=True, exist_ok=True)
        logger.info('extracting_archive', archive=str(archive))
        # the cache entry appears only once tar has succeeded
        with tempfile.TemporaryDirectory(prefix='.extract_', dir=cache_dir.parent) as staging:
            extracted = Path(staging) / 'tree'
            extracted.mkdir()
            self._run([self.settings.tar, '-xf', str(archive), '-C', str(extracted)])
            extracted.rename(cache_dir)

    def fetch_archive(self, source: BundleSource, *, force_update: bool = False) -> FetchedBundle:
        archive = Path(source.url).expanduser().resolve()
        if not archive.is_file():
            msg = f'archive not found: {source.url}'
            raise FetchError(msg)

        digest = hashlib.sha256(archive.read_bytes()).hexdigest()
        if source.tag and source.tag != digest:
            msg = f'checksum mismatch for {archive}: expected {source.tag}, got {digest}'
            raise FetchError(msg)

        # keyed by content
        cache_dir = cache_dir_for(self.settings, source) / digest[:16]
        if cache_dir.exists() and force_update:
            shutil.rmtree(cache_dir)
        if not cache_dir.exists():
            self._extract(archive, cache_dir)

        entries = [item for item in cache_dir.iterdir() if not item.name.startswith('.')]
        root = entries[0] if len(entries) == 1 and entries[0].is_dir() else cache_dir

        resolved = source.model_copy(update={'url': str(archive), 'tag': digest})
        return FetchedBundle(path=root, source=resolved)

import re
from pathlib import Path

from modman.models import BundleSource

ARCHIVE_SUFFIXES = ('.tar.gz', '.tgz', '.tar.bz2', '.tar.xz', '.tar')
GIT_URL_PREFIXES = ('https://', 'http://', 'ssh://', 'git://', 'git@')
LOCAL_PREFIXES = ('.', '/', '~')


def _split_tag(locator: str) -> tuple[str, str | None]:
    """Split a trailing ``@tag`` pin off a locator.

    The ``@`` in ``git@host:org/repo`` is not a pin because the text after it
    still contains a path separator.
    """
    if '@' not in locator:
        return locator, None
    base, tag = locator.rsplit('@', 1)
    if not base or not tag or '/' in tag or ':' in tag:
        return locator, None
    return base, tag


def parse_source(source: str) -> BundleSource:
    """Parse a source string into a BundleSource.

    Supports formats:
    - file::path, or ./relative, ../relative, /absolute, ~/home paths
    - git::url[@tag], or https://, ssh://, git@host: URLs
    - github:org/repo[@tag]
    - tar::archive, or paths ending in .tar, .tar.gz, .tgz, ...
    - nickname[@tag] looked up in the package listing
    """
    source = source.strip()
    if not source:
        msg = 'Invalid source format: empty source'
        raise ValueError(msg)

    if '::' in source:
        kind, locator = source.split('::', 1)
        if kind == 'file':
            return BundleSource(kind='file', url=locator or '.')
        if kind in ('git', 'tar'):
            url, tag = _split_tag(locator)
            return BundleSource(kind=kind, url=url, tag=tag)
        msg = f'Invalid source format: {source}'
        raise ValueError(msg)

    if source.startswith('github:'):
        github_match = re.match(r'^github:([^/]+)/([^@/]+)(?:@(.+))?$', source)
        if not github_match:
            msg = f'Invalid source format: {source}'
            raise ValueError(msg)
        org, repo, tag = github_match.groups()
        return BundleSource(
            kind='git',
            url=f'https://github.com/{org.strip()}/{repo.strip()}.git',
            tag=tag.strip() if tag else None,
        )

    if source.startswith(GIT_URL_PREFIXES):
        url, tag = _split_tag(source)
        return BundleSource(kind='git', url=url, tag=tag)

    if source.endswith(ARCHIVE_SUFFIXES):
        return BundleSource(kind='tar', url=source)

    if source.startswith(LOCAL_PREFIXES):
        return BundleSource(kind='file', url=source)

    package_match = re.match(r'^([A-Za-z0-9][A-Za-z0-9._-]*)(?:@(.+))?$', source)
    if package_match:
        name, tag = package_match.groups()
        return BundleSource(kind='registry', url=name, tag=tag)

    msg = f'Invalid source format: {source}'
    raise ValueError(msg)


def default_bundle_name(source: BundleSource) -> str:
    """Name a bundle when neither the source nor its descriptor names it."""
    if source.name:
        return source.name
    if source.kind == 'registry':
        return source.url
    if source.kind == 'file':
        return Path(source.url).expanduser().resolve().name
    tail = re.split(r'[/:]', source.url.rstrip('/'))[-1]
    if source.kind == 'git':
        return tail.removesuffix('.git')
    for suffix in ARCHIVE_SUFFIXES:
        if tail.endswith(suffix):
            return tail[: -len(suffix)]
    return tail


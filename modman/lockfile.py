"""Lockfile save and load.

A lockfile lists every installed bundle, sorted by bundle name, with enough
information (source kind, locator, pin) to re-obtain exactly that bundle.
Files ending in ``.jdn`` use the data-notation format; ``.yaml``/``.yml``
files use YAML.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from modman import jdn
from modman.errors import LockfileError, PartialLockfileApplyError
from modman.logging import get_logger
from modman.models import InstalledBundle, LockRecord
from modman.store import BundleStore

logger = get_logger(__name__)

DEFAULT_LOCKFILE = 'lockfile.jdn'
YAML_SUFFIXES = ('.yaml', '.yml')


def build_records(installed: Iterable[InstalledBundle]) -> list[LockRecord]:
    """Lock records for ``installed``, in canonical (name) order."""
    return sorted((bundle.to_lock_record() for bundle in installed), key=lambda r: r.name)


def _record_data(record: LockRecord) -> dict[str, Any]:
    data = record.model_dump(exclude_none=True)
    # only dependency-only bundles carry the flag
    if not data['auto_remove']:
        del data['auto_remove']
    return data


def encode_records(records: list[LockRecord], path: Path) -> str:
    data = [_record_data(record) for record in records]
    if path.suffix in YAML_SUFFIXES:
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    for item in data:
        item['type'] = jdn.Keyword(item['type'])
    return jdn.dumps(data)


def decode_records(text: str, path: Path) -> list[LockRecord]:
    try:
        data: Any = yaml.safe_load(text) if path.suffix in YAML_SUFFIXES else jdn.loads(text)
    except (yaml.YAMLError, jdn.JDNError) as exc:
        msg = f'failed to parse lockfile {path}: {exc}'
        raise LockfileError(msg) from exc

    if data is None:
        return []
    if not isinstance(data, list):
        msg = f'lockfile root must be a sequence in {path}'
        raise LockfileError(msg)

    records = []
    for index, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            msg = f'lockfile record {index} in {path} is not a mapping'
            raise LockfileError(msg)
        try:
            records.append(LockRecord.model_validate({str(k): _plain(v) for k, v in item.items()}))
        except ValidationError as exc:
            msg = f'invalid lockfile record {index} in {path}: {exc}'
            raise LockfileError(msg) from exc
    return records


def _plain(value: Any) -> Any:
    # keywords load as a str subclass
    return str(value) if isinstance(value, str) else value


def save(path: Path, installed: Iterable[InstalledBundle]) -> list[LockRecord]:
    """Write a lockfile describing ``installed`` to ``path``."""
    records = build_records(installed)
    content = encode_records(records, path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    except OSError as exc:
        msg = f'cannot write lockfile {path}: {exc}'
        raise LockfileError(msg) from exc
    logger.info('lockfile_saved', path=str(path), bundles=len(records))
    return records


def read(path: Path) -> list[LockRecord]:
    """Read the records of a lockfile in file order."""
    if not path.is_file():
        msg = f'lockfile not found: {path}'
        raise LockfileError(msg)
    return decode_records(path.read_text(), path)


def load(path: Path, store: BundleStore) -> list[str]:
    """Install every record of the lockfile at ``path``, in file order.

    Stops at the first failing record and raises PartialLockfileApplyError;
    records installed before it are not rolled back.
    """
    records = read(path)
    installed: list[str] = []
    for position, record in enumerate(records, start=1):
        logger.info('installing_lock_record', position=position, total=len(records), bundle=record.name)
        try:
            store.install(
                record.to_source(),
                force_update=True,
                no_deps=True,
                auto_remove=record.auto_remove,
            )
        except Exception as exc:  # noqa: BLE001 - reported with the record position
            logger.error(
                'lockfile_apply_stopped',
                position=position,
                bundle=record.name,
                installed=installed,
                error=str(exc),
            )
            raise PartialLockfileApplyError(position, len(records), record.name, exc) from exc
        installed.append(record.name)
    logger.info('lockfile_loaded', path=str(path), bundles=len(installed))
    return installed


__all__ = ['DEFAULT_LOCKFILE', 'build_records', 'load', 'read', 'save']

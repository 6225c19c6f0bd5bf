"""Native build capability.

Loaded on demand by the commands that need it, never imported by the router.
"""

import shutil
import tempfile
import zipapp
from pathlib import Path

from modman.errors import NativeBuildError
from modman.logging import get_logger
from modman.settings import Settings

logger = get_logger(__name__)

INTERPRETER = '/usr/bin/env python3'


def quickbin(entry: Path, output: Path, settings: Settings) -> Path:
    """Pack ``entry`` into a standalone executable zip application at ``output``."""
    entry = entry.resolve()
    if not entry.is_file():
        msg = f'entry script not found: {entry}'
        raise NativeBuildError(msg)

    output = output.resolve()
    interpreter = settings.toolchain or INTERPRETER
    output.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.TemporaryDirectory(prefix='modman_quickbin_') as staging:
        staging_dir = Path(staging)
        shutil.copy2(entry, staging_dir / '__main__.py')
        logger.debug('staged_entry', entry=str(entry), _debug_staging=str(staging_dir))
        try:
            zipapp.create_archive(staging_dir, target=output, interpreter=interpreter, compressed=True)
        except (OSError, zipapp.ZipAppError) as exc:
            msg = f'cannot create {output}: {exc}'
            raise NativeBuildError(msg) from exc

    logger.info('quickbin_created', entry=str(entry), output=str(output))
    return output

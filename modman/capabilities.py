"""On-demand loading of optional, heavyweight capabilities."""

import importlib
from types import ModuleType

from modman.errors import ModmanError
from modman.logging import get_logger

logger = get_logger(__name__)

CAPABILITIES = {
    'native': 'modman.native',
}


def load_capability(name: str) -> ModuleType:
    """Import the module providing capability ``name``."""
    try:
        module_path = CAPABILITIES[name]
    except KeyError:
        msg = f'unknown capability {name!r}'
        raise ModmanError(msg) from None

    logger.debug('loading_capability', capability=name, module=module_path)
    try:
        return importlib.import_module(module_path)
    except ImportError as exc:
        msg = f'capability {name!r} is unavailable: {exc}'
        raise ModmanError(msg) from exc

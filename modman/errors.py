"""Error taxonomy for modman.

Every failure that should reach the process boundary as a message plus a
non-zero exit derives from :class:`ModmanError`.
"""


class ModmanError(RuntimeError):
    """Base class for all modman failures."""


class ConfigError(ModmanError):
    """Raised when environment or option values cannot be turned into settings."""


class UnknownCommandError(ModmanError):
    """Raised when the requested subcommand is not in the command table."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        msg = f'unknown command: {name}\navailable commands: {", ".join(available)}'
        super().__init__(msg)


class UsageError(ModmanError):
    """Raised when a command receives the wrong number of arguments."""


class NoProjectFoundError(ModmanError):
    """Raised when no project descriptor exists at or above a directory."""


class ProjectDescriptorError(ModmanError):
    """Raised when a project descriptor cannot be read or validated."""


class UnknownHookError(ModmanError):
    """Raised for hook names outside the lifecycle hook set."""


class UnknownTaskError(ModmanError):
    """Raised when ``run`` names a task the project does not declare."""


class HookFailedError(ModmanError):
    """Raised when a hook implementation reports a failure."""

    def __init__(self, hook: str, status: int, detail: str = '') -> None:
        self.hook = hook
        self.status = status
        msg = f'hook {hook} failed with status {status}'
        if detail:
            msg = f'{msg}: {detail}'
        super().__init__(msg)


class MissingListingError(ModmanError):
    """Raised when the package listing has not been installed."""


class UnknownPackageError(ModmanError):
    """Raised when a registry nickname is absent from the package listing."""


class FetchError(ModmanError):
    """Raised when a bundle source cannot be fetched."""


class BundleNotInstalledError(ModmanError):
    """Raised when removing a bundle that is not in the store."""


class LockfileError(ModmanError):
    """Raised when a lockfile cannot be read or written."""


class PartialLockfileApplyError(LockfileError):
    """Raised when a lockfile load stops partway through its records.

    Records before ``position`` stay installed.
    """

    def __init__(self, position: int, total: int, record_name: str, cause: Exception) -> None:
        self.position = position
        self.total = total
        self.record_name = record_name
        self.cause = cause
        msg = f'lockfile record {position}/{total} ({record_name}) failed: {cause}'
        super().__init__(msg)


class ScaffoldError(ModmanError):
    """Raised when a project or environment cannot be created."""


class NativeBuildError(ModmanError):
    """Raised by the native build capability."""


__all__ = [
    'BundleNotInstalledError',
    'ConfigError',
    'FetchError',
    'HookFailedError',
    'LockfileError',
    'MissingListingError',
    'ModmanError',
    'NativeBuildError',
    'NoProjectFoundError',
    'PartialLockfileApplyError',
    'ProjectDescriptorError',
    'ScaffoldError',
    'UnknownCommandError',
    'UnknownHookError',
    'UnknownPackageError',
    'UnknownTaskError',
    'UsageError',
]

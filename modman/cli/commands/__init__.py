"""Command registrations for the modman CLI."""

from modman.cli.router import CommandRegistry

from . import bundles, general, lifecycle, lockfiles, scaffolding


def register_all(registry: CommandRegistry) -> None:
    """Register all modman subcommands."""
    general.register(registry)
    bundles.register(registry)
    lifecycle.register(registry)
    lockfiles.register(registry)
    scaffolding.register(registry)


def build_registry() -> CommandRegistry:
    """A registry holding every subcommand."""
    registry = CommandRegistry()
    register_all(registry)
    return registry

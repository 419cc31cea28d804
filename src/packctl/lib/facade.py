"""Service facade for the CLI.

Provides a single entry point for the plugin operations so the
presentation layer does not import every service module directly.
"""

from .core.config import get_location_check, get_pack_root
from .plugins.context import PackContext
from .plugins.errors import GitCommandError, LocationError, PackError
from .plugins.registrar import (
    Registration,
    RegistrationReport,
    check_location,
    list_plugins,
    register_plugins,
    update_plugins,
)
from .plugins.resolver import plugin_name, resolve_url
from .plugins.submodules import SubmoduleStatus

__all__ = [
    "GitCommandError",
    "LocationError",
    "PackContext",
    "PackError",
    "Registration",
    "RegistrationReport",
    "SubmoduleStatus",
    "add_plugins",
    "check_location",
    "list_plugins",
    "plugin_name",
    "register_plugins",
    "resolve_url",
    "update_plugins",
]


def add_plugins(
    ctx: PackContext, mode: str, references: list[str], check: bool = False
) -> RegistrationReport:
    """Run the location guard (when enabled) and register *references* under *mode*.

    The guard runs when *check* is True or ``pack.location_check`` is set
    in the global config.
    """
    if check or get_location_check():
        check_location(ctx, get_pack_root())
    return register_plugins(ctx, mode, references)

"""Shared argcomplete completers and helpers for CLI commands."""

from __future__ import annotations

import argparse
from collections.abc import Callable
from typing import Any

from ...lib.core.config import get_pack_root


def complete_pack_dirs(
    prefix: str, parsed_args: argparse.Namespace, **kwargs: object
) -> list[str]:  # pragma: no cover
    """Return pack repository directories under the package root matching *prefix*."""
    try:
        dirs = [str(p) for p in sorted(get_pack_root().iterdir()) if p.is_dir()]
    except (OSError, SystemExit):
        return []
    if prefix:
        dirs = [d for d in dirs if d.startswith(prefix)]
    return dirs


def set_completer(action: argparse.Action, fn: Callable[..., Any]) -> None:
    """Attach an argcomplete completer to *action*, ignoring missing argcomplete."""
    action.completer = fn  # type: ignore[attr-defined]

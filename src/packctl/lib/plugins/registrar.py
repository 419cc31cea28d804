# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Register plugins as submodules of the pack repository.

Every registration is committed on its own right after ``git submodule
add``. When something fails mid-batch, earlier registrations stay committed
and nothing is rolled back. With the ``abort`` policy the failure
propagates at once; with ``continue`` it is reported and the next
reference is processed.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path

from .._util.logging_utils import _log_debug
from ..core.config import MODES
from .context import PackContext
from .errors import GitCommandError, LocationError, PackError
from .resolver import plugin_name, resolve_url
from .submodules import SubmoduleStatus


@dataclass
class Registration:
    mode: str
    name: str
    url: str
    path: str


@dataclass
class RegistrationReport:
    """Outcome of one ``register_plugins`` batch."""

    added: list[Registration] = field(default_factory=list)
    failed: list[tuple[str, PackError]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


def check_location(ctx: PackContext, pack_root: Path) -> None:
    """Ensure the working tree containing *ctx.root* sits directly under *pack_root*.

    Raises LocationError otherwise.
    """
    top = ctx.backend.toplevel()
    if top is None:
        raise LocationError(f"Not inside a git working tree: {ctx.root}")
    parent = Path(top).resolve().parent
    expected = Path(pack_root).expanduser().resolve()
    if parent != expected:
        raise LocationError(
            f"packctl must run from a repository directly under {expected}\n"
            f"  working tree: {top}"
        )


def commit_message(ctx: PackContext, url: str) -> str:
    return f"{ctx.prog}: add {url}"


def register_plugin(ctx: PackContext, mode: str, reference: str) -> Registration:
    """Add one reference as a submodule under ``<mode>/<name>`` and commit it."""
    url = resolve_url(reference, ctx.host)
    name = plugin_name(url)
    path = f"{mode}/{name}"
    _log_debug(f"register_plugin: reference={reference} url={url} path={path}")

    print(f"==> Adding {url} as {path}")
    ctx.backend.add_submodule(url, path, shallow=ctx.shallow, progress=ctx.progress)
    ctx.backend.commit(commit_message(ctx, url), [".gitmodules", path])
    return Registration(mode=mode, name=name, url=url, path=path)


def update_plugins(ctx: PackContext) -> None:
    """Re-sync submodule URLs and initialize/update the whole tree recursively."""
    _log_debug(f"update_plugins: root={ctx.root}")
    print("==> Syncing submodules...")
    ctx.backend.sync()
    print("==> Updating submodules...")
    ctx.backend.update_all()


def register_plugins(ctx: PackContext, mode: str, references: list[str]) -> RegistrationReport:
    """Register every reference in input order, then sync and update all submodules.

    Raises PackError for an unknown mode or an empty reference list, before
    touching the repository. Under the ``abort`` policy the first failing
    add/commit is raised as-is and sync/update are skipped.
    """
    if mode not in MODES:
        raise PackError(f"Unknown mode {mode!r}: expected one of {', '.join(MODES)}")
    if not references:
        raise PackError("No repositories given")

    report = RegistrationReport()
    for reference in references:
        try:
            report.added.append(register_plugin(ctx, mode, reference))
        except GitCommandError as e:
            if ctx.on_error != "continue":
                raise
            _log_debug(f"register_plugins: skipping {reference}: {e}")
            print(f"Warning: could not add {reference}: {e}", file=sys.stderr)
            report.failed.append((reference, e))

    if report.added:
        update_plugins(ctx)
    return report


def list_plugins(ctx: PackContext) -> list[SubmoduleStatus]:
    return ctx.backend.status()

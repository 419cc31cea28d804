"""Plugin commands: start/opt/add, update, list."""

import argparse

from ...lib.core.config import MODES
from ...lib.facade import PackContext, add_plugins, list_plugins, update_plugins
from ._completers import complete_pack_dirs, set_completer


def _directory_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    _a = parent.add_argument(
        "-C",
        "--directory",
        default=None,
        help="Pack repository to operate on (default: current directory)",
    )
    set_completer(_a, complete_pack_dirs)
    return parent


def _add_parent(directory: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False, parents=[directory])
    parent.add_argument(
        "--keep-going",
        action="store_true",
        help="Warn and continue with the next repository when one fails to add",
    )
    parent.add_argument(
        "--no-shallow",
        dest="no_shallow",
        action="store_true",
        help="Clone full history instead of a depth-1 clone",
    )
    parent.add_argument(
        "--check-location",
        action="store_true",
        help="Refuse to run unless the repository sits directly under the package root",
    )
    parent.add_argument(
        "repositories",
        nargs="+",
        metavar="repository",
        help="Repository URL or owner/name shorthand",
    )
    return parent


def register(subparsers) -> None:
    """Register plugin subcommands."""
    directory = _directory_parent()
    add_opts = _add_parent(directory)

    # start / opt
    for mode in MODES:
        p_mode = subparsers.add_parser(
            mode,
            parents=[add_opts],
            help=f"Add repositories as submodules under {mode}/",
        )
        p_mode.set_defaults(mode=mode)

    # add
    p_add = subparsers.add_parser(
        "add",
        parents=[add_opts],
        help="Add repositories under the default mode (see pack.default_mode)",
    )
    group = p_add.add_mutually_exclusive_group()
    for mode in MODES:
        group.add_argument(
            f"--{mode}",
            dest="mode",
            action="store_const",
            const=mode,
            help=f"Add under {mode}/",
        )

    # update
    subparsers.add_parser(
        "update",
        parents=[directory],
        help="Sync submodule URLs and initialize/update all submodules recursively",
    )

    # list
    subparsers.add_parser(
        "list",
        parents=[directory],
        help="List submodules with their branch and commit",
    )


def _context(args: argparse.Namespace, **overrides) -> PackContext:
    return PackContext.from_config(args.directory, **overrides)


def _cmd_add(args: argparse.Namespace, default_mode: str) -> None:
    ctx = _context(
        args,
        on_error="continue" if args.keep_going else None,
        shallow=False if args.no_shallow else None,
    )
    mode = args.mode or default_mode
    report = add_plugins(ctx, mode, args.repositories, check=args.check_location)

    for reg in report.added:
        print(f"Added {reg.name} ({reg.url}) at {reg.path}")
    if report.failed:
        failed = ", ".join(ref for ref, _ in report.failed)
        raise SystemExit(
            f"{len(report.failed)} of {len(args.repositories)} repositories could not be added: "
            f"{failed}"
        )


def _cmd_list(args: argparse.Namespace) -> None:
    entries = list_plugins(_context(args))
    if not entries:
        print("No plugins registered")
        return
    for entry in entries:
        line = f"{entry.name:<28} {entry.branch:<16} {entry.commit}"
        if entry.state != "ok":
            line += f"  [{entry.state}]"
        print(line)


def dispatch(args: argparse.Namespace, default_mode: str = "start") -> bool:
    """Handle plugin commands.  Returns True if handled."""
    if args.cmd in MODES or args.cmd == "add":
        _cmd_add(args, default_mode)
        return True
    if args.cmd == "update":
        update_plugins(_context(args))
        print("Submodules up to date")
        return True
    if args.cmd == "list":
        _cmd_list(args)
        return True
    return False

#!/usr/bin/env python3

import argparse
import sys

from .. import __version__
from ..lib.core.config import MODES, get_default_mode
from ..lib.facade import PackError
from .commands import plugins

# Optional: bash completion via argcomplete
try:
    import argcomplete  # type: ignore
except Exception:  # pragma: no cover - optional dep
    argcomplete = None  # type: ignore

COMMANDS = (*MODES, "add", "update", "list")
HELP_FLAGS = ("-h", "--help", "help")


class _StderrHelpAction(argparse.Action):
    """``-h``/``--help`` that prints help to stderr and exits with status 1."""

    def __init__(self, option_strings, dest=argparse.SUPPRESS, help=None):
        super().__init__(option_strings, dest=dest, default=argparse.SUPPRESS, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help(sys.stderr)
        parser.exit(1)


class _UsageParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors and help with exit status 1."""

    def __init__(self, *args, **kwargs) -> None:
        kwargs["add_help"] = False
        super().__init__(*args, **kwargs)
        self.add_argument(
            "-h", "--help", action=_StderrHelpAction, help="Show this help message and exit"
        )

    def error(self, message: str):  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="packctl",
        description="packctl – add, update and list Vim plugins kept as git submodules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  packctl tpope/vim-fugitive junegunn/fzf      (add under start/)\n"
            "  packctl opt https://github.com/preservim/nerdtree\n"
            "  packctl add --opt dense-analysis/ale\n"
            "  packctl update\n"
            "  packctl list\n"
            "\n"
            "When the first argument is not a command, all arguments are\n"
            "repositories added under the default mode (start).\n"
            "Help (-h/--help, also after a command) goes to stderr with exit status 1.\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"packctl {__version__}")
    sub = parser.add_subparsers(dest="cmd", required=True)
    plugins.register(sub)
    return parser


def wants_usage(argv: list[str]) -> bool:
    """Return True for no arguments, an empty first argument or a help flag."""
    return not argv or not argv[0] or argv[0] in HELP_FLAGS


def resolve_argv(argv: list[str], default_mode: str) -> list[str] | None:
    """Map the raw argument list onto a subcommand invocation.

    Returns None when usage should be printed (no arguments, an empty first
    argument or a help flag). Arguments that do not start with a known
    command are treated as repositories for *default_mode*.
    """
    if wants_usage(argv):
        return None
    if argv[0] in COMMANDS or argv[0] == "--version":
        return list(argv)
    return [default_mode, *argv]


def main(argv: list[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()

    # Enable bash completion if argcomplete is present and activated
    if argcomplete is not None:  # pragma: no cover - shell integration
        try:
            argcomplete.autocomplete(parser)  # type: ignore[attr-defined]
        except Exception:
            pass

    if wants_usage(argv):
        parser.print_help(sys.stderr)
        raise SystemExit(1)

    default_mode = get_default_mode()
    resolved = resolve_argv(argv, default_mode)

    args = parser.parse_args(resolved)
    try:
        handled = plugins.dispatch(args, default_mode)
    except PackError as e:
        raise SystemExit(str(e))
    if not handled:
        parser.error(f"unknown command: {args.cmd}")


if __name__ == "__main__":
    main()

"""Git submodule operations behind a small, substitutable interface.

``SubmoduleBackend`` lists everything the registrar needs from the version
control tool. ``GitSubmodules`` implements it by running ``git`` with the
pack repository as its working directory; tests substitute a fake.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .._util.logging_utils import _log_debug
from .errors import GitCommandError, PackError

# ``git submodule status`` prefixes each line with one of these markers.
_STATUS_STATES = {
    " ": "ok",
    "-": "uninitialized",
    "+": "modified",
    "U": "conflict",
}


@dataclass
class SubmoduleStatus:
    """One entry of the submodule tree as reported by ``git submodule status``."""

    name: str
    path: str
    commit: str
    branch: str
    state: str


class SubmoduleBackend(Protocol):
    def add_submodule(self, url: str, path: str, *, shallow: bool, progress: bool) -> None: ...

    def commit(self, message: str, paths: list[str]) -> None: ...

    def sync(self) -> None: ...

    def update_all(self) -> None: ...

    def status(self) -> list[SubmoduleStatus]: ...

    def toplevel(self) -> Path | None: ...


def parse_status_line(line: str) -> tuple[str, str, str] | None:
    """Parse one ``git submodule status`` line into ``(state, commit, path)``.

    Lines look like ``" 1a2b3c… start/vim-fugitive (v3.7)"``; the leading
    character encodes the state. Returns None for blank lines.
    """
    if not line.strip():
        return None
    marker = line[0]
    parts = line[1:].strip().split(" ", 1)
    if len(parts) < 2:
        return None
    commit, path = parts
    # Trailing " (describe)" is only present for checked-out submodules.
    if path.endswith(")") and " (" in path:
        path = path.rsplit(" (", 1)[0]
    state = _STATUS_STATES.get(marker, "unknown")
    return state, commit, path


class GitSubmodules:
    """``SubmoduleBackend`` that shells out to ``git`` inside *root*."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _git(
        self, args: list[str], *, capture: bool = False, cwd: Path | None = None
    ) -> subprocess.CompletedProcess:
        cmd = ["git", *args]
        workdir = cwd or self.root
        _log_debug(f"git: cwd={workdir} cmd={cmd}")
        if not Path(workdir).is_dir():
            raise PackError(f"Not a directory: {workdir}")
        try:
            result = subprocess.run(
                cmd,
                cwd=str(workdir),
                capture_output=capture,
                text=True,
            )
        except FileNotFoundError:
            raise PackError("git not found on host; please install git")
        if result.returncode != 0:
            _log_debug(f"git: exit={result.returncode} cmd={cmd}")
            raise GitCommandError(cmd, result.returncode, result.stderr if capture else "")
        return result

    def add_submodule(self, url: str, path: str, *, shallow: bool, progress: bool) -> None:
        args = ["submodule", "add", "--force"]
        if shallow:
            args += ["--depth", "1"]
        if progress:
            args.append("--progress")
        args += [url, path]
        self._git(args)

    def commit(self, message: str, paths: list[str]) -> None:
        self._git(["commit", "-m", message, "--", *paths])

    def sync(self) -> None:
        self._git(["submodule", "sync", "--recursive"])

    def update_all(self) -> None:
        self._git(["submodule", "update", "--init", "--recursive"])

    def _branch(self, path: Path) -> str:
        if not path.is_dir():
            return "-"
        try:
            result = self._git(["rev-parse", "--abbrev-ref", "HEAD"], capture=True, cwd=path)
        except GitCommandError:
            return "-"
        return result.stdout.strip() or "-"

    def status(self) -> list[SubmoduleStatus]:
        result = self._git(["submodule", "status"], capture=True)
        entries = []
        for line in result.stdout.splitlines():
            parsed = parse_status_line(line)
            if parsed is None:
                continue
            state, commit, path = parsed
            branch = "-" if state == "uninitialized" else self._branch(self.root / path)
            entries.append(
                SubmoduleStatus(
                    name=Path(path).name,
                    path=path,
                    commit=commit,
                    branch=branch,
                    state=state,
                )
            )
        return entries

    def toplevel(self) -> Path | None:
        try:
            result = self._git(["rev-parse", "--show-toplevel"], capture=True)
        except GitCommandError:
            return None
        top = result.stdout.strip()
        return Path(top) if top else None

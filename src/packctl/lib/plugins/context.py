"""Per-run context shared by the plugin operations."""

from dataclasses import dataclass
from pathlib import Path

from ..core.config import (
    DEFAULT_HOST,
    get_git_host,
    get_git_progress,
    get_git_shallow,
    get_on_error_policy,
)
from .submodules import GitSubmodules, SubmoduleBackend


@dataclass
class PackContext:
    """Where and how plugin operations run.

    ``root`` is the pack repository working tree. Every git command runs
    with it as its working directory; the process CWD is never changed.
    """

    root: Path
    backend: SubmoduleBackend
    host: str = DEFAULT_HOST
    shallow: bool = True
    progress: bool = True
    on_error: str = "abort"
    prog: str = "packctl"

    @classmethod
    def from_config(cls, root: Path | None = None, **overrides) -> "PackContext":
        """Build a context from the global config, applying non-None *overrides*.

        *root* (default: the current directory) may be anywhere inside the
        pack repository; the context is anchored at its working tree top.
        """
        root = Path(root).expanduser().resolve() if root else Path.cwd().resolve()
        values = {
            "host": get_git_host(),
            "shallow": get_git_shallow(),
            "progress": get_git_progress(),
            "on_error": get_on_error_policy(),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        injected = values.pop("backend", None)
        backend = injected or GitSubmodules(root)
        top = backend.toplevel()
        if top is not None and Path(top).resolve() != root:
            root = Path(top).resolve()
            if injected is None:
                backend = GitSubmodules(root)
        return cls(root=root, backend=backend, **values)

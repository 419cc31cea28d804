"""Exception types raised by the plugin services.

The CLI turns any :class:`PackError` into ``SystemExit`` with the error
message, so service code raises these instead of exiting directly.
"""


class PackError(Exception):
    """Base class for packctl failures reported to the user."""


class LocationError(PackError):
    """Raised when packctl runs outside the expected pack repository."""


class GitCommandError(PackError):
    """A ``git`` invocation exited with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr or ""
        detail = self.stderr.strip().splitlines()[-1] if self.stderr.strip() else ""
        message = f"{' '.join(self.args_list)} failed with exit code {returncode}"
        if detail:
            message += f": {detail}"
        super().__init__(message)

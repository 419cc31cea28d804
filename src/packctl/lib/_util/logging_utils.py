"""Utility functions for logging."""


def _log_debug(message: str) -> None:
    """Append a simple debug line to the packctl log.

    Writes timestamped lines to ``state_root()/packctl.log``. Any IO error
    is ignored so this function never raises or affects callers.
    """
    try:
        import time

        from ..core.paths import state_root

        log_path = state_root() / "packctl.log"
        log_path.parent.mkdir(parents=True, exist_ok=True)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(f"[{timestamp}] {message}\n")
    except Exception:
        pass

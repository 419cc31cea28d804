# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Platform-aware path resolution for config and state directories."""

import getpass
import os
from pathlib import Path

from platformdirs import user_config_dir as _user_config_dir, user_data_dir as _user_data_dir

APP_NAME = "packctl"


def _is_root() -> bool:
    """Return True if the current process is running as root."""
    try:
        return os.geteuid() == 0  # type: ignore[attr-defined]
    except AttributeError:
        return getpass.getuser() == "root"


def config_root() -> Path:
    """
    Base directory for configuration (config.yml).

    Priority:
      1. PACKCTL_CONFIG_DIR
      2. if root   → /etc/packctl
         else      → ~/.config/packctl
    """
    env = os.getenv("PACKCTL_CONFIG_DIR")
    if env:
        return Path(env).expanduser()

    if _is_root():
        return Path("/etc") / APP_NAME

    return Path(_user_config_dir(APP_NAME))


def state_root() -> Path:
    """
    Writable state (debug log).

    Priority:
      1. PACKCTL_STATE_DIR
      2. if root   → /var/lib/packctl
         else      → ${XDG_DATA_HOME:-~/.local/share}/packctl
    """
    env = os.getenv("PACKCTL_STATE_DIR")
    if env:
        return Path(env).expanduser()

    if _is_root():
        return Path("/var/lib") / APP_NAME

    return Path(_user_data_dir(APP_NAME))

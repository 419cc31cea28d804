import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml  # pip install pyyaml

from .paths import config_root as _config_root_base

MODES = ("start", "opt")
ON_ERROR_POLICIES = ("abort", "continue")

DEFAULT_HOST = "github.com"
DEFAULT_PACK_ROOT = "~/.vim/pack"

# ---------- Config file discovery ----------


def global_config_search_paths() -> list[Path]:
    """Return the ordered list of paths that will be checked for global config.

    Behavior matches global_config_path():
    - If PACKCTL_CONFIG_FILE is set, only that single path is considered.
    - Otherwise, check in order:
        1) PACKCTL_CONFIG_DIR/config.yml or ${XDG_CONFIG_HOME:-~/.config}/packctl/config.yml
        2) sys.prefix/etc/packctl/config.yml
        3) /etc/packctl/config.yml
    """
    env_file = os.environ.get("PACKCTL_CONFIG_FILE")
    if env_file:
        return [Path(env_file).expanduser().resolve()]

    if os.environ.get("PACKCTL_CONFIG_DIR"):
        user_cfg = _config_root_base() / "config.yml"
    else:
        xdg_home = os.environ.get("XDG_CONFIG_HOME")
        user_cfg = (
            (Path(xdg_home) if xdg_home else Path.home() / ".config") / "packctl" / "config.yml"
        )
    sp_cfg = Path(sys.prefix) / "etc" / "packctl" / "config.yml"
    etc_cfg = Path("/etc/packctl/config.yml")
    return [user_cfg, sp_cfg, etc_cfg]


def global_config_path() -> Path:
    """Global config file path (resolved based on search paths).

    The explicit PACKCTL_CONFIG_FILE override is returned even if missing
    so the intent stays visible to the user. Otherwise the first existing
    candidate wins, falling back to the last one (/etc/packctl/config.yml).
    """
    candidates = global_config_search_paths()
    if len(candidates) == 1:
        return candidates[0]

    for c in candidates:
        if c.is_file():
            return c.resolve()
    return candidates[-1]


# ---------- Global config ----------


def load_global_config() -> dict[str, Any]:
    cfg_path = global_config_path()
    if not cfg_path.is_file():
        return {}
    try:
        data = yaml.safe_load(cfg_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SystemExit(f"Invalid config file {cfg_path}: {e}")
    if not isinstance(data, dict):
        return {}
    return data


def get_global_section(key: str) -> dict[str, Any]:
    """Return a top-level section from the global config, defaulting to ``{}``.

    If the value under *key* is not a dict (e.g. the user wrote ``git: "oops"``),
    returns ``{}`` to avoid ``AttributeError`` in callers that expect ``.get()``.
    """
    cfg = load_global_config()
    value = cfg.get(key, {})
    if not isinstance(value, dict):
        return {}
    return value or {}


# ---------- Path resolution ----------


def _resolve_path(
    env_var: str | None,
    config_key: tuple[str, str] | None,
    default: Callable[[], Path],
) -> Path:
    """Resolve a path: env var → global config → computed default."""
    if env_var:
        env = os.environ.get(env_var)
        if env:
            return Path(env).expanduser().resolve()

    if config_key:
        val = get_global_section(config_key[0]).get(config_key[1])
        if val:
            return Path(str(val)).expanduser().resolve()

    return default().resolve()


def get_pack_root() -> Path:
    """Package root the pack repository is expected to live in.

    Precedence:
    - Environment variable PACKCTL_PACK_ROOT
    - Global config pack.root
    - ~/.vim/pack
    """
    return _resolve_path(
        "PACKCTL_PACK_ROOT", ("pack", "root"), lambda: Path(DEFAULT_PACK_ROOT).expanduser()
    )


# ---------- Settings ----------


def get_location_check() -> bool:
    """Return whether the location guard runs before adding plugins (default False)."""
    return bool(get_global_section("pack").get("location_check", False))


def get_default_mode() -> str:
    """Return pack.default_mode, validated against MODES (default ``start``)."""
    mode = get_global_section("pack").get("default_mode", "start")
    if mode not in MODES:
        raise SystemExit(f"Invalid pack.default_mode {mode!r}: expected one of {', '.join(MODES)}")
    return mode


def get_git_host() -> str:
    """Return the public hosting service used for short ``owner/name`` references."""
    return str(get_global_section("git").get("host") or DEFAULT_HOST)


def get_git_shallow() -> bool:
    return bool(get_global_section("git").get("shallow", True))


def get_git_progress() -> bool:
    return bool(get_global_section("git").get("progress", True))


def get_on_error_policy() -> str:
    """Return registrar.on_error: ``abort`` (default) or ``continue``."""
    policy = get_global_section("registrar").get("on_error", "abort")
    if policy not in ON_ERROR_POLICIES:
        raise SystemExit(
            f"Invalid registrar.on_error {policy!r}: expected one of {', '.join(ON_ERROR_POLICIES)}"
        )
    return policy

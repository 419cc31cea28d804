# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Turn user-supplied repository references into clone URLs.

A reference is either a full URL (``https://``, ``http://``, ``git://``,
``git@…`` or ``ssh://git@…``) or a short ``owner/name`` pair living on the
public hosting service. Resolution is a pure string transformation: no
network access happens and no input is rejected.
"""

from ..core.config import DEFAULT_HOST

URL_PREFIXES = ("https://", "http://", "git://", "git@", "ssh://git@")


def is_full_url(reference: str) -> bool:
    """Return True if *reference* starts with a recognized URL scheme prefix."""
    return reference.startswith(URL_PREFIXES)


def _strip_query_and_fragment(url: str) -> str:
    for sep in ("#", "?"):
        url = url.split(sep, 1)[0]
    return url.rstrip("/")


def _host_prefixes(host: str) -> tuple[str, ...]:
    return (
        f"https://{host}/",
        f"http://{host}/",
        f"git://{host}/",
        f"git@{host}:",
        f"ssh://git@{host}/",
    )


def resolve_url(reference: str, host: str = DEFAULT_HOST) -> str:
    """Return the canonical clone URL for *reference*.

    Full URLs lose any query string and fragment; when they point at *host*
    a missing ``.git`` suffix is appended. Everything else is treated as
    ``owner/name`` on *host*, e.g. ``junegunn/fzf`` becomes
    ``https://github.com/junegunn/fzf.git``.
    """
    reference = reference.strip()
    if is_full_url(reference):
        url = _strip_query_and_fragment(reference)
        if url.startswith(_host_prefixes(host)) and not url.endswith(".git"):
            url += ".git"
        return url

    short = _strip_query_and_fragment(reference).strip("/")
    if not short.endswith(".git"):
        short += ".git"
    return f"https://{host}/{short}"


def plugin_name(url: str) -> str:
    """Derive the local plugin directory name from a URL or reference.

    Uses only the final path segment (after ``/`` or ``:``) and strips a
    trailing ``.git``: ``https://github.com/a/b.git`` → ``b``.
    """
    tail = url.rstrip("/").rsplit("/", 1)[-1]
    tail = tail.rsplit(":", 1)[-1]
    if tail.endswith(".git"):
        tail = tail[: -len(".git")]
    return tail

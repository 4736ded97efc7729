from __future__ import annotations

import os
from typing import Callable, Optional

from .util import run


def git_root(cwd: str) -> Optional[str]:
    try:
        res = run(["git", "rev-parse", "--show-toplevel"], cwd=cwd)
    except OSError:
        return None
    if res.code != 0:
        return None
    return res.stdout.strip() or None


def check_ignore(repo_root: str, path: str) -> bool:
    """Ask git whether ``path`` is ignored; any failure counts as not ignored."""
    try:
        res = run(["git", "check-ignore", "-q", "--", path], cwd=repo_root)
    except OSError:
        return False
    return res.code == 0


def ignore_checker(watch_root: str) -> Optional[Callable[[str], bool]]:
    """Build the ignore delegate for ``watch_root``, or None outside a work tree."""
    repo_root = git_root(watch_root)
    if repo_root is None:
        return None

    def is_ignored(path: str) -> bool:
        # paths arrive relative to the watch root
        if not os.path.isabs(path):
            path = os.path.join(watch_root, path)
        return check_ignore(repo_root, path)

    return is_ignored

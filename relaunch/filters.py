"""
Filter Layer - Decide whether a changed path should trigger a restart.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from .config import WatchConfig


GIT_DIR_RE = re.compile(r"(.*/)?\.git(/.*)?")


def should_trigger(
    path: str,
    cfg: WatchConfig,
    is_ignored: Optional[Callable[[str], bool]] = None,
) -> bool:
    """Check a changed path against the include, VCS and exclude rules.

    Rules are applied in order and the first decisive one wins:
    the empty path (initial run) always triggers, then the include
    list, then ``.git`` and VCS ignore rules, then the exclude list.

    Args:
        path: Changed path, relative to the watch root
        cfg: Active watch configuration
        is_ignored: Optional VCS ignore delegate

    Returns:
        bool: True if the path should cause a restart
    """
    if not path:
        return True

    if cfg.include and not any(p.search(path) for p in cfg.include):
        return False

    if cfg.vcs_ignore:
        if GIT_DIR_RE.fullmatch(path):
            return False
        if is_ignored is not None and _safe_is_ignored(is_ignored, path):
            return False

    if cfg.exclude and any(p.search(path) for p in cfg.exclude):
        return False

    return True


def _safe_is_ignored(is_ignored: Callable[[str], bool], path: str) -> bool:
    # A failing delegate never hides a change
    try:
        return bool(is_ignored(path))
    except Exception:
        return False

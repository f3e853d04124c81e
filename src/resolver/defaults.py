"""Process-wide defaults, computed once and passed into each resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from constants import Constants


@dataclass(frozen=True)
class ProcessDefaults:
    """Values derived from the process environment.

    ``category_override`` forces a single category for every call made with
    these defaults; it is a debugging aid, not part of the stable contract.
    """

    home_dir: str
    global_paths: Tuple[str, ...]
    node_version: str
    category_override: Optional[str] = None


def build_process_defaults(environ=None) -> ProcessDefaults:
    """Derive defaults from ``environ`` (``os.environ`` when omitted)."""
    env = os.environ if environ is None else environ
    home_dir = os.path.expanduser("~")
    return ProcessDefaults(
        home_dir=home_dir,
        global_paths=tuple(os.path.join(home_dir, d) for d in Constants.DEFAULT_GLOBAL_DIRS),
        node_version=env.get(Constants.ENV_NODE_VERSION) or Constants.DEFAULT_NODE_VERSION,
        category_override=env.get(Constants.ENV_CATEGORY) or None,
    )


@lru_cache(maxsize=1)
def get_process_defaults() -> ProcessDefaults:
    """Defaults for this process, read from the environment on first use."""
    return build_process_defaults()

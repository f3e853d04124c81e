"""Asynchronous module resolution.

The synchronous algorithm runs unchanged in a worker thread, so probe order,
tie-breaks, results and errors match ``resolve_sync`` exactly.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

from .defaults import ProcessDefaults, get_process_defaults
from .sync import resolve_sync


async def resolve(
    specifier: Any,
    options: Optional[Mapping[str, Any]] = None,
    defaults: Optional[ProcessDefaults] = None,
) -> str:
    """Awaitable form of ``resolve_sync``."""
    # defaults come from the calling thread
    defaults = defaults or get_process_defaults()
    return await asyncio.to_thread(resolve_sync, specifier, options, defaults)

"""Built-in (core) node module detection."""

from __future__ import annotations

from functools import lru_cache

import semantic_version

# name -> node version range in which the module is built in
_CORE_MODULES = {
    "assert": "*",
    "assert/strict": ">=15",
    "async_hooks": ">=8",
    "buffer": "*",
    "child_process": "*",
    "cluster": ">=0.5",
    "console": "*",
    "constants": "*",
    "crypto": "*",
    "dgram": "*",
    "diagnostics_channel": ">=14.17 <15 || >=15.1",
    "dns": "*",
    "dns/promises": ">=15",
    "domain": ">=0.7.12",
    "events": "*",
    "fs": "*",
    "fs/promises": ">=14",
    "http": "*",
    "http2": ">=8.8",
    "https": "*",
    "inspector": ">=8",
    "module": "*",
    "net": "*",
    "os": "*",
    "path": "*",
    "path/posix": ">=15.3",
    "path/win32": ">=15.3",
    "perf_hooks": ">=8.5",
    "process": ">=1",
    "punycode": ">=0.5",
    "querystring": "*",
    "readline": "*",
    "readline/promises": ">=17",
    "repl": "*",
    "stream": "*",
    "stream/consumers": ">=16.7",
    "stream/promises": ">=15",
    "stream/web": ">=16.5",
    "string_decoder": "*",
    "sys": "*",
    "timers": "*",
    "timers/promises": ">=15",
    "tls": "*",
    "trace_events": ">=10",
    "tty": "*",
    "url": "*",
    "util": "*",
    "util/types": ">=15.3",
    "v8": ">=1",
    "vm": "*",
    "wasi": ">=13.4 <13.5 || >=18.17 <19 || >=20",
    "worker_threads": ">=11.7",
    "zlib": ">=0.5",
}

# Only reachable through the "node:" scheme
_PREFIX_ONLY = {
    "node:sea": ">=20.12 <21 || >=21.7",
    "node:sqlite": ">=22.13 <23 || >=23.4",
    "node:test": ">=16.17 <17 || >=18",
    "node:test/reporters": ">=18.17 <19 || >=19.9 <20.2 || >=20.4",
}

_NODE_SCHEME_RANGE = ">=14.18 <15 || >=16"


@lru_cache(maxsize=None)
def _spec(range_str: str) -> semantic_version.NpmSpec:
    return semantic_version.NpmSpec(range_str)


def _available(range_str: str, version: semantic_version.Version) -> bool:
    return range_str == "*" or _spec(range_str).match(version)


def is_core(name: str, node_version: str) -> bool:
    """Return True when ``name`` is a built-in module of ``node_version``."""
    version = semantic_version.Version.coerce(node_version.lstrip("v"))
    if name in _PREFIX_ONLY:
        return _available(_PREFIX_ONLY[name], version)
    if name.startswith("node:"):
        bare = name[len("node:"):]
        return (
            bare in _CORE_MODULES
            and _available(_NODE_SCHEME_RANGE, version)
            and _available(_CORE_MODULES[bare], version)
        )
    return name in _CORE_MODULES and _available(_CORE_MODULES[name], version)

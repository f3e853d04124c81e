"""Filesystem capability set used by the resolver.

The algorithm only touches the filesystem through an ``FsProbe``; callers may
replace any capability with a hook of the same signature.
"""

from __future__ import annotations

import errno
import json
import os
import stat
from dataclasses import dataclass
from typing import Any, Callable, Union

FileContent = Union[str, bytes]

_MISSING = (errno.ENOENT, errno.ENOTDIR)


def _stat(path: str):
    try:
        return os.stat(path)
    except OSError as exc:
        if exc.errno in _MISSING:
            return None
        raise


def default_is_file(path: str) -> bool:
    """Regular files and FIFOs count as files."""
    st = _stat(path)
    return st is not None and (stat.S_ISREG(st.st_mode) or stat.S_ISFIFO(st.st_mode))


def default_is_directory(path: str) -> bool:
    st = _stat(path)
    return st is not None and stat.S_ISDIR(st.st_mode)


def default_read_file(path: str) -> bytes:
    with open(path, "rb") as fh:
        return fh.read()


def default_realpath(path: str) -> str:
    """Resolve symlinks; a path that does not exist is returned unchanged."""
    try:
        return os.path.realpath(path, strict=True)
    except OSError as exc:
        if exc.errno != errno.ENOENT:
            raise
    return path


def default_read_package(read_file: Callable[[str], FileContent], path: str) -> Any:
    """Parse a manifest; syntax errors surface as ``ValueError``."""
    return json.loads(read_file(path))


@dataclass(frozen=True)
class FsProbe:
    """File predicate, directory predicate, readers and symlink resolver."""

    is_file: Callable[[str], bool] = default_is_file
    is_directory: Callable[[str], bool] = default_is_directory
    read_file: Callable[[str], FileContent] = default_read_file
    read_package: Callable[[Callable[[str], FileContent], str], Any] = default_read_package
    realpath: Callable[[str], str] = default_realpath

    def read_manifest(self, path: str) -> Any:
        return self.read_package(self.read_file, path)

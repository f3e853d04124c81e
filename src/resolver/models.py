"""Data models for a single resolution call."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

from .categories import Category
from .probe import FsProbe

PathsOption = Union[Tuple[str, ...], Callable[..., Sequence[str]]]


@dataclass(frozen=True)
class ResolverConfig:
    """Fully populated configuration produced by ``normalize_options``."""

    extensions: Tuple[str, ...]
    categories: Tuple[Category, ...]
    conditions: Tuple[str, ...]
    include_core_modules: bool
    preserve_symlinks: bool
    paths: PathsOption
    module_directories: Tuple[str, ...]
    node_version: str
    probe: FsProbe
    basedir: Optional[str] = None
    filename: Optional[str] = None
    package_filter: Optional[Callable[..., Any]] = None
    path_filter: Optional[Callable[..., Optional[str]]] = None
    package_iterator: Optional[Callable[..., Sequence[str]]] = None
    # caller options as given, handed back to hooks
    options: Mapping[str, Any] = field(default_factory=dict)

    def maybe_realpath(self, path: str) -> str:
        if self.preserve_symlinks:
            return path
        return self.probe.realpath(path)


@dataclass(frozen=True)
class ResolutionRequest:
    """Immutable input of one resolution call."""

    specifier: str
    basedir: str
    parent: str
    config: ResolverConfig


@dataclass(frozen=True)
class PackageManifest:
    """A located manifest. ``content`` is None when it failed to parse."""

    directory: str
    path: str
    content: Optional[Any]

    @property
    def name(self):
        return self.content.get("name") if isinstance(self.content, dict) else None

    @property
    def main(self):
        return self.content.get("main") if isinstance(self.content, dict) else None

    def declares(self, key: str) -> bool:
        return isinstance(self.content, dict) and key in self.content


def same_path(left: str, right: str) -> bool:
    """Compare two paths after lexical normalization."""
    return os.path.normpath(left) == os.path.normpath(right)

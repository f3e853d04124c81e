"""Exports-map evaluation.

An exports declaration is parsed into one of four node kinds, each with its
own evaluation method:

- ``ExportsLeaf``: a relative target path
- ``ExportsArray``: fallbacks tried left to right
- ``ConditionalMap``: condition name -> node, tried in active-condition order
- ``SubpathMap``: subpath key -> node, tried in declaration order

Object nodes are validated when they are reached; a structural problem is a
hard ``ERR_PACKAGE_PATH_NOT_EXPORTED`` failure.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from common.logging_utils import extra_context, is_debug_enabled

from .categories import Category, features
from .errors import PackagePathNotExportedError
from .files import FileResolver
from .models import PackageManifest, same_path
from .validate_exports import STATUS_CONDITIONS, validate_exports_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportsLeaf:
    target: str


@dataclass(frozen=True)
class ExportsArray:
    items: Tuple[Any, ...]


@dataclass(frozen=True)
class ConditionalMap:
    entries: Dict[str, Any]


@dataclass(frozen=True)
class SubpathMap:
    entries: Dict[str, Any]


ExportsNode = Union[ExportsLeaf, ExportsArray, ConditionalMap, SubpathMap]


class ExportsShapeError(ValueError):
    """An exports object failed structural validation."""

    def __init__(self, problems: List[str]):
        super().__init__("; ".join(problems) or "invalid exports object")
        self.problems = problems


def parse_exports_node(raw: Any) -> Optional[ExportsNode]:
    """Tag one level of an exports declaration.

    Returns None for a ``null`` target. Children stay raw until evaluated.

    Raises:
        ExportsShapeError: when an object is empty, mixed or malformed, or
            the value is of an unsupported type.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        return ExportsLeaf(raw)
    if isinstance(raw, list):
        return ExportsArray(tuple(raw))
    validation = validate_exports_object(raw)
    if not validation.ok:
        problems = validation.problems or [f'"exports" object is {validation.status}']
        raise ExportsShapeError(problems)
    if validation.status == STATUS_CONDITIONS:
        return ConditionalMap(dict(raw))
    return SubpathMap(dict(raw))


def _is_dir_slash_key(key: str) -> bool:
    return key.endswith("/") or key.endswith(os.sep)


class ExportsResolver:
    """Resolves requests through a package's exports under one category."""

    def __init__(self, category: Category, conditions: Tuple[str, ...], files: FileResolver):
        self.category = Category(category)
        self.features = features(self.category)
        if self.features.default_condition_only:
            conditions = tuple(c for c in conditions if c == "default") or ("default",)
        self.conditions = conditions
        self.files = files

    def _not_exported(self, manifest: PackageManifest, request: str, problems=None):
        relative = os.path.relpath(request, manifest.directory)
        subpath = "." if relative == "." else "./" + relative.replace(os.sep, "/")
        return PackagePathNotExportedError(subpath, manifest.path, problems)

    def resolve_package(self, manifest: PackageManifest, request: str) -> Tuple[bool, Optional[str]]:
        """Apply ``manifest``'s exports to ``request`` (an absolute path).

        Returns ``(honored, path)``. ``honored`` is False when the category or
        the manifest leaves exports out of play, so the caller falls back to
        legacy resolution. When honored, ``path`` is None only for a subpath
        request against a root-only (string/array) declaration.

        Raises:
            PackagePathNotExportedError: when honored exports lead nowhere.
        """
        if not self.features.exports or not manifest.declares("exports"):
            return False, None
        exports = manifest.content["exports"]
        if exports is None:
            return False, None

        is_root = same_path(request, manifest.directory)
        if isinstance(exports, (str, list)):
            if not is_root:
                return True, None
        elif isinstance(exports, dict):
            if not self.features.object_exports:
                return False, None
        else:
            raise self._not_exported(
                manifest, request, [f'"exports" must be a string, array or object, got {type(exports).__name__}']
            )

        try:
            found = self.resolve(manifest.directory, exports, request)
        except ExportsShapeError as exc:
            raise self._not_exported(manifest, request, exc.problems) from exc
        if found is None:
            raise self._not_exported(manifest, request)
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved through exports",
                extra=extra_context(
                    event="decision",
                    component="exports",
                    action="resolve_package",
                    target=request,
                    outcome="found",
                    category=self.category.value,
                    path=found,
                ),
            )
        return True, found

    def resolve(self, package_dir: str, raw: Any, request: str) -> Optional[str]:
        """Evaluate one exports node; None means no match."""
        if isinstance(raw, dict) and not self.features.object_exports:
            return None
        node = parse_exports_node(raw)
        if node is None:
            return None
        if isinstance(node, ExportsLeaf):
            return self._resolve_leaf(package_dir, node)
        if isinstance(node, ExportsArray):
            return self._resolve_array(package_dir, node, request)
        if isinstance(node, ConditionalMap):
            return self._resolve_conditions(package_dir, node, request)
        return self._resolve_subpaths(package_dir, node, request)

    def _resolve_leaf(self, package_dir: str, node: ExportsLeaf) -> Optional[str]:
        return self.files.load_as_file(os.path.normpath(os.path.join(package_dir, node.target)))

    def _resolve_array(self, package_dir: str, node: ExportsArray, request: str) -> Optional[str]:
        for item in node.items:
            found = self.resolve(package_dir, item, request)
            if found:
                return found
        return None

    def _resolve_conditions(self, package_dir: str, node: ConditionalMap, request: str) -> Optional[str]:
        for condition in self.conditions:
            if condition not in node.entries:
                continue
            found = self.resolve(package_dir, node.entries[condition], request)
            if found:
                return found
        return None

    def _resolve_subpaths(self, package_dir: str, node: SubpathMap, request: str) -> Optional[str]:
        for key, value in node.entries.items():
            if key == ".":
                matched = same_path(request, package_dir)
            else:
                matched = same_path(os.path.join(package_dir, key), request)
            if not matched:
                continue
            if _is_dir_slash_key(key) and not self.features.dir_slash_keys:
                continue
            found = self.resolve(package_dir, value, request)
            if found:
                return found
        return None

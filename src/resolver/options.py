"""Options normalizer: merges caller options with defaults and validates them."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Tuple

import semantic_version

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled

from .categories import Category, all_category_names, get_categories_for_range, is_category
from .defaults import ProcessDefaults
from .errors import InvalidOptionsError
from .models import ResolverConfig
from .probe import FsProbe

logger = logging.getLogger(__name__)

HOOK_KEYS = (
    "is_file",
    "is_directory",
    "read_file",
    "read_package",
    "realpath",
    "package_filter",
    "path_filter",
    "package_iterator",
)

KNOWN_KEYS = frozenset(HOOK_KEYS) | {
    "basedir",
    "filename",
    "extensions",
    "include_core_modules",
    "preserve_symlinks",
    "paths",
    "module_directory",
    "resolution",
    "node_version",
}

CATEGORY_MESSAGE = (
    "`resolution` must be `True`, a semver range string, `{\"category\": ...}` with a known "
    "node \"exports\" category (" + ", ".join(all_category_names()) + "), "
    "or `{\"engines\": True}`"
)

_NO_CONDITIONS = (Category.PRE_EXPORTS.value, Category.BROKEN.value)


def _string_tuple(value: Any, name: str) -> Tuple[str, ...]:
    """Validate a sequence of strings; a bare string is not accepted."""
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise InvalidOptionsError(f"`{name}` must be an array of strings")
    if not all(isinstance(item, str) for item in value):
        raise InvalidOptionsError(f"`{name}` must be an array of strings")
    return tuple(value)


def _or_default(value: Any, default: Any) -> Any:
    """An explicit empty list is kept; only a missing value takes the default."""
    return default if value is None else value


def _check_node_version(node_version: Any) -> str:
    """Reject a ``node_version`` that cannot be read as a version number."""
    if not isinstance(node_version, str):
        raise InvalidOptionsError("`node_version` must be a version string")
    try:
        semantic_version.Version.coerce(node_version.lstrip("v"))
    except ValueError as exc:
        raise InvalidOptionsError(f"Invalid node version '{node_version}': {exc}") from exc
    return node_version


def _resolve_categories(resolution: Any, node_version: str) -> Tuple[Tuple[Category, ...], Optional[Tuple[str, ...]]]:
    """Return (categories, conditions or None) for a ``resolution`` option."""
    if not resolution:
        raise InvalidOptionsError(CATEGORY_MESSAGE)
    if resolution is True:
        return tuple(get_categories_for_range(node_version.lstrip("v"))), None
    if isinstance(resolution, str):
        return tuple(get_categories_for_range(resolution)), None
    if not isinstance(resolution, Mapping):
        raise InvalidOptionsError(CATEGORY_MESSAGE)

    engines = resolution.get("engines")
    category = resolution.get("category")
    if (
        (engines is not None and category is not None)
        or (engines is None and category is None)
        or (category is not None and not is_category(category))
        or (engines is not None and engines is not True)
    ):
        raise InvalidOptionsError(CATEGORY_MESSAGE)
    categories = tuple(Category) if engines else (Category(category),)

    conditions = None
    if "conditions" in resolution:
        if category is not None and category in _NO_CONDITIONS:
            raise InvalidOptionsError(
                "`conditions` is not supported for the `pre-exports` or `broken` categories"
            )
        conditions = _string_tuple(resolution["conditions"], "conditions")
    return categories, conditions


def normalize_options(specifier: Any, options: Optional[Mapping[str, Any]], defaults: ProcessDefaults) -> ResolverConfig:
    """Build the configuration for one resolution call.

    Raises:
        InvalidOptionsError: on a non-string specifier or any bad option.
    """
    if not isinstance(specifier, str):
        raise InvalidOptionsError("Path must be a string.")
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise InvalidOptionsError("options must be a mapping")
    unknown = sorted(set(options) - KNOWN_KEYS)
    if unknown:
        raise InvalidOptionsError(f"Unknown option(s): {', '.join(unknown)}")

    opts = dict(options)
    if defaults.category_override:
        opts["resolution"] = {"category": defaults.category_override}

    node_version = _check_node_version(opts.get("node_version") or defaults.node_version)
    categories: Tuple[Category, ...] = (Category.PRE_EXPORTS,)
    conditions: Tuple[str, ...] = tuple(Constants.DEFAULT_CONDITIONS)
    if "resolution" in opts:
        categories, explicit_conditions = _resolve_categories(opts["resolution"], node_version)
        if explicit_conditions is not None:
            conditions = explicit_conditions

    for key in HOOK_KEYS:
        if opts.get(key) is not None and not callable(opts[key]):
            raise InvalidOptionsError(f"`{key}` must be a function")
    if opts.get("read_file") and opts.get("read_package"):
        raise InvalidOptionsError("`read_file` and `read_package` are mutually exclusive.")

    probe_hooks = {
        key: opts[key]
        for key in ("is_file", "is_directory", "read_file", "read_package", "realpath")
        if opts.get(key)
    }

    paths = opts.get("paths")
    if paths is None:
        paths = defaults.global_paths
    elif not callable(paths):
        paths = _string_tuple(paths, "paths")

    module_directory = _or_default(opts.get("module_directory"), Constants.DEFAULT_MODULE_DIRECTORIES)
    if isinstance(module_directory, str):
        module_directory = [module_directory]

    config = ResolverConfig(
        extensions=_string_tuple(_or_default(opts.get("extensions"), Constants.DEFAULT_EXTENSIONS), "extensions"),
        categories=categories,
        conditions=conditions,
        include_core_modules=opts.get("include_core_modules") is not False,
        preserve_symlinks=bool(opts.get("preserve_symlinks")),
        paths=paths,
        module_directories=_string_tuple(module_directory, "module_directory"),
        node_version=node_version,
        probe=FsProbe(**probe_hooks),
        basedir=opts.get("basedir") or None,
        filename=opts.get("filename") or None,
        package_filter=opts.get("package_filter"),
        path_filter=opts.get("path_filter"),
        package_iterator=opts.get("package_iterator"),
        options=options,
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Options normalized",
            extra=extra_context(
                event="decision",
                component="options",
                action="normalize",
                target=specifier,
                categories=[c.value for c in categories],
                conditions=list(conditions),
            ),
        )
    return config

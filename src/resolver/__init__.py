"""CommonJS-style module specifier resolution.

``resolve_sync`` / ``resolve`` map a specifier to a file path the way node's
``require`` does, with the exports-map rules of a selectable node era.
"""

from .aio import resolve
from .categories import Category, get_categories_for_range
from .errors import (
    IncorrectPackageMainError,
    InvalidBasedirError,
    InvalidOptionsError,
    InvalidPackageMainError,
    ModuleNotFound,
    PackagePathNotExportedError,
    ResolveError,
)
from .sync import resolve_sync

__all__ = [
    "Category",
    "IncorrectPackageMainError",
    "InvalidBasedirError",
    "InvalidOptionsError",
    "InvalidPackageMainError",
    "ModuleNotFound",
    "PackagePathNotExportedError",
    "ResolveError",
    "get_categories_for_range",
    "resolve",
    "resolve_sync",
]

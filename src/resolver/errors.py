"""Errors raised by the resolver.

Every user-visible failure carries a stable ``code`` (see ``ErrorCodes``) and a
message naming the offending specifier or path.
"""

from __future__ import annotations

from typing import List, Optional

from constants import ErrorCodes


class ResolveError(Exception):
    """Base class for resolution failures."""

    code: Optional[str] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidOptionsError(ResolveError, TypeError):
    """Raised when the caller supplies a bad specifier or bad options."""

    code = ErrorCodes.INVALID_OPTIONS.value


class InvalidBasedirError(ResolveError, TypeError):
    """Raised when an explicit basedir is not a directory."""

    code = ErrorCodes.INVALID_BASEDIR.value

    def __init__(self, basedir: str, preserve_symlinks: bool):
        suffix = "" if preserve_symlinks else ", or a symlink to a directory"
        super().__init__(f'Provided basedir "{basedir}" is not a directory{suffix}')
        self.basedir = basedir


class ModuleNotFound(ResolveError):
    """Raised once every resolution branch is exhausted."""

    code = ErrorCodes.MODULE_NOT_FOUND.value

    def __init__(self, specifier: str, parent: str):
        super().__init__(f"Cannot find module '{specifier}' from '{parent}'")
        self.specifier = specifier
        self.parent = parent


class PackagePathNotExportedError(ResolveError):
    """Raised when an honored "exports" field does not lead to a file."""

    code = ErrorCodes.PACKAGE_PATH_NOT_EXPORTED.value

    def __init__(self, subpath: str, manifest_path: str, problems: Optional[List[str]] = None):
        super().__init__(
            f"Package subpath '{subpath}' is not defined by \"exports\" in '{manifest_path}'"
        )
        self.subpath = subpath
        self.manifest_path = manifest_path
        self.problems = list(problems or [])


class InvalidPackageMainError(ResolveError, TypeError):
    """Raised when a manifest's ``main`` is not a string."""

    code = ErrorCodes.INVALID_PACKAGE_MAIN.value

    def __init__(self, package_name):
        super().__init__(f"package “{package_name}” `main` must be a string")
        self.package_name = package_name


class IncorrectPackageMainError(ResolveError):
    """Raised when a manifest's ``main`` names nothing that exists."""

    code = ErrorCodes.INCORRECT_PACKAGE_MAIN.value

    def __init__(self, main_path: str):
        super().__init__(
            f"Cannot find module '{main_path}'. Please verify that the package.json "
            "has a valid \"main\" entry"
        )
        self.main_path = main_path

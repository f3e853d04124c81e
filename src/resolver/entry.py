"""Package directory entry points: exports, then ``main``, then ``index``."""

from __future__ import annotations

import logging
import os
from typing import Optional, Set

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled

from .errors import IncorrectPackageMainError, InvalidPackageMainError, ResolveError
from .exports import ExportsResolver
from .files import FileResolver
from .manifest import ManifestLocator
from .models import ResolverConfig, same_path

logger = logging.getLogger(__name__)


class EntryPointResolver:
    """Resolves a directory to the file it stands for."""

    def __init__(
        self,
        config: ResolverConfig,
        locator: ManifestLocator,
        files: FileResolver,
        exports: ExportsResolver,
    ):
        self.config = config
        self.locator = locator
        self.files = files
        self.exports = exports

    def resolve_subpath(self, package_root: str, request: str):
        """Check a bare-specifier subpath against the package root's exports.

        Returns ``(honored, path)`` as ``ExportsResolver.resolve_package``.
        """
        manifest = self.locator.read(package_root)
        if manifest is None or manifest.content is None:
            return False, None
        return self.exports.resolve_package(manifest, request)

    def resolve_directory(self, path: str, visited: Optional[Set[str]] = None) -> Optional[str]:
        """Resolve ``path`` as a package directory.

        ``visited`` holds the package directories already entered through
        ``main`` in this chain; re-entering one yields None.

        Raises:
            PackagePathNotExportedError: honored exports do not match.
            InvalidPackageMainError: ``main`` is not a string.
            IncorrectPackageMainError: ``main`` names nothing that exists.
        """
        probe = self.config.probe
        package_dir = self.config.maybe_realpath(path) if probe.is_directory(path) else path
        visited = set() if visited is None else visited
        key = os.path.normpath(package_dir)
        if key in visited:
            logger.debug("Package main cycle at %s", package_dir)
            return None
        visited.add(key)
        manifest = self.locator.read(package_dir, path)

        if manifest is not None and manifest.content is not None:
            honored, found = self.exports.resolve_package(manifest, package_dir)
            if honored:
                return found

            main = manifest.main
            if main:
                return self._resolve_main(path, manifest.name, main, visited)

        return self.files.load_as_file(os.path.join(path, Constants.INDEX_NAME))

    def _resolve_main(self, path: str, package_name, main, visited: Set[str]) -> str:
        if not isinstance(main, str):
            raise InvalidPackageMainError(package_name)
        if main in (".", "./"):
            main = Constants.INDEX_NAME
        main_path = os.path.normpath(os.path.join(path, main))

        try:
            found = self.files.load_as_file(main_path)
            if not found and not same_path(main_path, path):
                found = self.resolve_directory(main_path, visited)
            if not found:
                found = self.files.load_as_file(os.path.join(path, Constants.INDEX_NAME))
        except ResolveError as exc:
            logger.debug("Error while resolving main %s: %s", main_path, exc)
            found = None
        if found:
            return found

        if is_debug_enabled(logger):
            logger.debug(
                "Package main unresolved",
                extra=extra_context(
                    event="decision",
                    component="entry",
                    action="resolve_main",
                    target=main_path,
                    outcome="incorrect_main",
                ),
            )
        raise IncorrectPackageMainError(main_path)

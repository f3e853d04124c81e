"""Synchronous module resolution entry point."""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Mapping, Optional

from common.logging_utils import Timer, extra_context, is_debug_enabled

from .candidates import CandidateSearch
from .categories import Category
from .core_modules import is_core
from .defaults import ProcessDefaults, get_process_defaults
from .entry import EntryPointResolver
from .errors import InvalidBasedirError, ModuleNotFound, ResolveError
from .exports import ExportsResolver
from .files import FileResolver
from .manifest import ManifestLocator
from .models import ResolutionRequest, ResolverConfig
from .options import normalize_options

logger = logging.getLogger(__name__)

RELATIVE_PATH = re.compile(r"^(?:\.\.?(?:/|$)|/|([A-Za-z]:)?[/\\])")

BRANCH_PATH = "path"
BRANCH_CORE = "core"
BRANCH_PACKAGE = "package"


def classify(specifier: str, include_core_modules: bool, node_version: str) -> str:
    """Pick the resolution branch for ``specifier``."""
    if RELATIVE_PATH.match(specifier):
        return BRANCH_PATH
    if include_core_modules and is_core(specifier, node_version):
        return BRANCH_CORE
    return BRANCH_PACKAGE


class _CategoryResolution:
    """The resolver collaborators wired up for one category."""

    def __init__(self, request: ResolutionRequest, category: Category):
        config = request.config
        self.request = request
        self.locator = ManifestLocator(config)
        self.files = FileResolver(config, self.locator)
        self.exports = ExportsResolver(category, config.conditions, self.files)
        self.entry = EntryPointResolver(config, self.locator, self.files, self.exports)
        self.search = CandidateSearch(config, self.files, self.entry)

    def resolve_path(self) -> Optional[str]:
        specifier = self.request.specifier
        target = os.path.normpath(os.path.join(self.request.basedir, specifier))
        directory_form = specifier in (".", "..") or specifier.endswith(("/", "\\"))
        if not directory_form:
            found = self.files.load_as_file(target)
            if found:
                return found
        return self.entry.resolve_directory(target)

    def resolve_package(self) -> Optional[str]:
        return self.search.search(self.request.specifier, self.request.basedir)


def _build_request(specifier: str, config: ResolverConfig) -> ResolutionRequest:
    basedir = config.basedir or os.getcwd()
    absolute_start = config.maybe_realpath(os.path.abspath(basedir))
    if config.basedir and not config.probe.is_directory(absolute_start):
        raise InvalidBasedirError(config.basedir, config.preserve_symlinks)
    parent = config.filename or basedir
    return ResolutionRequest(specifier=specifier, basedir=absolute_start, parent=parent, config=config)


def resolve_sync(
    specifier: Any,
    options: Optional[Mapping[str, Any]] = None,
    defaults: Optional[ProcessDefaults] = None,
) -> str:
    """Resolve ``specifier`` to an absolute file path (or a core module name).

    Each category in the active set is tried in order and the first success
    wins. When every category fails, the first hard error raised is
    re-raised, else ``MODULE_NOT_FOUND``.

    Raises:
        InvalidOptionsError: bad specifier or options.
        InvalidBasedirError: an explicit ``basedir`` is not a directory.
        ModuleNotFound: nothing matched.
        PackagePathNotExportedError, InvalidPackageMainError,
        IncorrectPackageMainError: package-specific failures.
    """
    config = normalize_options(specifier, options, defaults or get_process_defaults())
    branch = classify(specifier, config.include_core_modules, config.node_version)
    if branch == BRANCH_CORE:
        logger.debug("Core module %s", specifier)
        return specifier
    request = _build_request(specifier, config)

    first_error: Optional[ResolveError] = None
    with Timer() as timer:
        for category in config.categories:
            resolution = _CategoryResolution(request, category)
            try:
                if branch == BRANCH_PATH:
                    found = resolution.resolve_path()
                else:
                    found = resolution.resolve_package()
            except ResolveError as exc:
                logger.debug("Category %s failed for %s: %s", category.value, specifier, exc)
                if first_error is None:
                    first_error = exc
                continue
            if found:
                result = config.maybe_realpath(found)
                if is_debug_enabled(logger):
                    logger.debug(
                        "Resolved",
                        extra=extra_context(
                            event="function_exit",
                            component="resolver",
                            action="resolve_sync",
                            target=specifier,
                            outcome="success",
                            category=category.value,
                            path=result,
                            duration_ms=timer.duration_ms(),
                        ),
                    )
                return result

    if first_error is not None:
        raise first_error
    raise ModuleNotFound(specifier, request.parent)

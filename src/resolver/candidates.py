"""Bare-specifier search across ancestor ``node_modules`` directories."""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional, Sequence, Tuple

from common.logging_utils import extra_context, is_debug_enabled

from .entry import EntryPointResolver
from .files import FileResolver
from .models import ResolverConfig

logger = logging.getLogger(__name__)


def split_package_specifier(specifier: str) -> Tuple[str, str]:
    """Split ``pkg/sub`` or ``@scope/pkg/sub`` into (name, subpath)."""
    parts = specifier.split("/")
    size = 2 if specifier.startswith("@") and len(parts) > 1 else 1
    return "/".join(parts[:size]), "/".join(parts[size:])


def node_modules_dirs(start: str, module_directories: Sequence[str]) -> List[str]:
    """Module directories at ``start`` and each of its ancestors, nearest first.

    An ancestor that is itself a module directory is not searched again
    (no ``node_modules/node_modules``).
    """
    dirs = []
    current = os.path.abspath(start)
    while True:
        if os.path.basename(current) not in module_directories:
            dirs.extend(os.path.join(current, name) for name in module_directories)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return dirs


def node_modules_paths(request: str, start: str, config: ResolverConfig) -> List[str]:
    """Ancestor module directories followed by the configured extra paths."""
    dirs = node_modules_dirs(start, config.module_directories)
    if callable(config.paths):
        extra = config.paths(
            request,
            start,
            lambda: node_modules_dirs(start, config.module_directories),
            config.options,
        )
    else:
        extra = config.paths
    return dirs + list(extra or [])


def package_candidates(request: str, start: str, config: ResolverConfig) -> List[str]:
    return [os.path.join(d, request) for d in node_modules_paths(request, start, config)]


def package_root_for(candidate: str, specifier: str) -> str:
    """Strip the specifier's subpath from ``candidate`` to get the package root."""
    _name, subpath = split_package_specifier(specifier)
    normalized = os.path.normpath(candidate)
    if not subpath:
        return normalized
    suffix = os.sep + os.path.normpath(subpath)
    if normalized.endswith(suffix):
        return normalized[: -len(suffix)]
    return normalized


class CandidateSearch:
    """Tries every candidate directory for a bare specifier, first hit wins."""

    def __init__(self, config: ResolverConfig, files: FileResolver, entry: EntryPointResolver):
        self.config = config
        self.files = files
        self.entry = entry

    def candidates(self, specifier: str, start: str) -> Iterable[str]:
        def supplier():
            return package_candidates(specifier, start, self.config)

        if self.config.package_iterator:
            return self.config.package_iterator(specifier, start, supplier, self.config.options)
        return supplier()

    def search(self, specifier: str, start: str) -> Optional[str]:
        probe = self.config.probe
        for candidate in self.candidates(specifier, start):
            root = package_root_for(candidate, specifier)
            if root != os.path.normpath(candidate) and probe.is_directory(root):
                honored, found = self.entry.resolve_subpath(root, os.path.normpath(candidate))
                if found:
                    return found
                if honored:
                    continue

            found = self.files.load_as_file(candidate)
            if found:
                return found
            if probe.is_directory(os.path.dirname(candidate)):
                found = self.entry.resolve_directory(candidate)
                if found:
                    return found
            if is_debug_enabled(logger):
                logger.debug(
                    "Candidate rejected",
                    extra=extra_context(
                        event="probe",
                        component="candidates",
                        action="search",
                        target=candidate,
                        outcome="miss",
                    ),
                )
        return None

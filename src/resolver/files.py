"""File-resolution base case: exact file, then configured extensions."""

from __future__ import annotations

import logging
import os
from typing import Optional

from common.logging_utils import extra_context, is_debug_enabled

from .manifest import ManifestLocator
from .models import ResolverConfig

logger = logging.getLogger(__name__)


class FileResolver:
    """Accepts a candidate path as a file, trying each extension in order."""

    def __init__(self, config: ResolverConfig, locator: ManifestLocator):
        self.config = config
        self.locator = locator

    def _apply_path_filter(self, candidate: str) -> str:
        manifest = self.locator.find(os.path.dirname(candidate))
        if manifest is None:
            return candidate
        relative = os.path.relpath(candidate, manifest.directory)
        rewritten = self.config.path_filter(manifest.content, candidate, relative)
        if rewritten:
            return os.path.normpath(os.path.join(manifest.directory, rewritten))
        return candidate

    def load_as_file(self, candidate: str) -> Optional[str]:
        if self.config.path_filter:
            candidate = self._apply_path_filter(candidate)

        is_file = self.config.probe.is_file
        if is_file(candidate):
            return candidate
        for extension in self.config.extensions:
            path = candidate + extension
            if is_file(path):
                return path
        if is_debug_enabled(logger):
            logger.debug(
                "No file for candidate",
                extra=extra_context(
                    event="probe",
                    component="files",
                    action="load_as_file",
                    target=candidate,
                    outcome="miss",
                ),
            )
        return None

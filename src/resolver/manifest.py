"""Manifest (package.json) reading and upward lookup."""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled

from .models import PackageManifest, ResolverConfig

logger = logging.getLogger(__name__)

_WINDOWS_DRIVE = re.compile(r"^\w:[/\\]*$")
_NODE_MODULES_BOUNDARY = re.compile(r"[/\\]node_modules[/\\]*$")


def _is_ascent_boundary(directory: str) -> bool:
    if directory in ("", "/"):
        return True
    if sys.platform == "win32" and _WINDOWS_DRIVE.match(directory):
        return True
    return bool(_NODE_MODULES_BOUNDARY.search(directory))


class ManifestLocator:
    """Reads manifests through the configured probe and filters."""

    def __init__(self, config: ResolverConfig):
        self.config = config
        self.probe = config.probe

    def _parse(self, manifest_file: str, directory: str, filter_dir: str) -> PackageManifest:
        try:
            content = self.probe.read_manifest(manifest_file)
        except ValueError as exc:
            # includes json.JSONDecodeError; any other failure propagates
            logger.debug("Ignoring unparsable manifest %s: %s", manifest_file, exc)
            content = None
        if content is not None and self.config.package_filter:
            content = self.config.package_filter(content, manifest_file, filter_dir)
        return PackageManifest(directory=directory, path=manifest_file, content=content)

    def read(self, package_dir: str, request_dir: Optional[str] = None) -> Optional[PackageManifest]:
        """Read the manifest directly inside ``package_dir``, if any.

        ``request_dir`` is the directory the caller asked for; it is what the
        package filter sees as the third argument.
        """
        manifest_file = os.path.join(package_dir, Constants.PACKAGE_JSON_FILE)
        if not self.probe.is_file(manifest_file):
            return None
        return self._parse(manifest_file, package_dir, request_dir or package_dir)

    def find(self, start_dir: str) -> Optional[PackageManifest]:
        """Walk up from ``start_dir`` to the nearest parsable manifest.

        Stops at the filesystem root, a bare drive root, or a directory that
        is itself a ``node_modules`` segment.
        """
        directory = start_dir
        while not _is_ascent_boundary(directory):
            if self.probe.is_directory(directory):
                lookup_dir = self.config.maybe_realpath(directory)
            else:
                lookup_dir = directory
            manifest_file = os.path.join(lookup_dir, Constants.PACKAGE_JSON_FILE)
            if self.probe.is_file(manifest_file):
                manifest = self._parse(manifest_file, directory, directory)
                if manifest.content is not None:
                    if is_debug_enabled(logger):
                        logger.debug(
                            "Manifest located",
                            extra=extra_context(
                                event="decision",
                                component="manifest",
                                action="find",
                                target=start_dir,
                                outcome="found",
                                manifest=manifest_file,
                            ),
                        )
                    return manifest
            parent = os.path.dirname(directory)
            if parent == directory:
                break
            directory = parent
        return None

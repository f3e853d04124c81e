"""Shared fixtures for resolver tests."""

import json

import pytest

from resolver.defaults import ProcessDefaults


def write_tree(root, files):
    """Create ``files`` (relative path -> str or JSON-able object) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, (dict, list)):
            path.write_text(json.dumps(content), encoding="utf-8")
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def root(tmp_path):
    """Resolved project directory so results compare equal after realpath."""
    project = tmp_path.resolve() / "project"
    project.mkdir()
    return project


@pytest.fixture
def tree(root):
    """Build a file tree under ``root`` and return ``root`` as a string."""

    def _build(files):
        write_tree(root, files)
        return str(root)

    return _build


@pytest.fixture
def defaults(tmp_path):
    """Process defaults isolated from the real home directory and environment."""
    return ProcessDefaults(
        home_dir=str(tmp_path),
        global_paths=(),
        node_version="20.11.1",
        category_override=None,
    )

"""Structural validation of a manifest's "exports" object."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

STATUS_EMPTY = "empty"
STATUS_CONDITIONS = "conditions"
STATUS_FILES = "files"
STATUS_PROBLEMS = "problems"


@dataclass
class ExportsValidation:
    """Classification of an exports object plus any structural problems.

    ``status`` is None when the value is not an object at all.
    """

    status: Optional[str]
    problems: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems and self.status in (STATUS_CONDITIONS, STATUS_FILES)


def _check_target(target: Any, where: str, problems: List[str]) -> None:
    if target is None:
        return
    if isinstance(target, str):
        if not target.startswith("./"):
            problems.append(f'{where}: target "{target}" must start with "./"')
            return
        segments = target[2:].replace("\\", "/").split("/")
        if ".." in segments or "node_modules" in segments:
            problems.append(f'{where}: target "{target}" must stay inside the package')
        return
    if isinstance(target, list):
        for index, item in enumerate(target):
            _check_target(item, f"{where}[{index}]", problems)
        return
    if isinstance(target, dict):
        for key, value in target.items():
            if key.startswith("."):
                problems.append(f'{where}: nested subpath key "{key}" is not allowed inside conditions')
                continue
            _check_target(value, f"{where}.{key}", problems)
        return
    problems.append(f"{where}: target must be a string, array, object or null, got {type(target).__name__}")


def validate_exports_object(exports: Any) -> ExportsValidation:
    """Classify ``exports`` as conditions or subpath files and collect problems.

    An object whose keys all start with ``.`` is a subpath map; one with no
    such key is a conditional map; mixing the two is a problem.
    """
    if not isinstance(exports, dict):
        return ExportsValidation(None, ["exports must be a non-array object"])
    if not exports:
        return ExportsValidation(STATUS_EMPTY)

    dotted = [key for key in exports if key.startswith(".")]
    if dotted and len(dotted) != len(exports):
        return ExportsValidation(
            STATUS_PROBLEMS,
            ['"exports" cannot mix subpath keys (starting with ".") with condition keys'],
        )

    problems: List[str] = []
    if dotted:
        for key, value in exports.items():
            if key != "." and not key.startswith("./"):
                problems.append(f'subpath key "{key}" must be "." or start with "./"')
            _check_target(value, key, problems)
        return ExportsValidation(STATUS_FILES, problems)

    for key, value in exports.items():
        _check_target(value, key, problems)
    return ExportsValidation(STATUS_CONDITIONS, problems)

"""Suite document loading, including the suites bundled with the package.

Bundled suites are listed in ``fixtures/manifest.json`` and parsed at most
once per process.
"""

from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Any, Dict, List, Union

from module_contracts.conformance.validators import validate_suite_document
from module_contracts.models import SuiteDefinitionError, TestSuite

_FIXTURES_DIR = Path(__file__).parent / "fixtures"
_MANIFEST_PATH = _FIXTURES_DIR / "manifest.json"


def _read_manifest() -> Dict[str, Any]:
    with open(_MANIFEST_PATH, "r", encoding="utf-8") as fh:
        manifest: Dict[str, Any] = json.load(fh)
    return manifest


def load_suite_document(path: Union[str, Path], strict: bool = False) -> TestSuite:
    """Parse and validate a suite definition JSON file.

    Raises:
        FileNotFoundError: If *path* does not exist.
        SuiteDefinitionError: If the file is not valid JSON or the document
            fails validation.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as fh:
        try:
            document: Any = json.load(fh)
        except json.JSONDecodeError as e:
            raise SuiteDefinitionError(str(path), (f"invalid JSON: {e}",)) from e

    if not isinstance(document, dict):
        raise SuiteDefinitionError(
            str(path), (f"top level must be an object, got {type(document).__name__}",)
        )

    result = validate_suite_document(document, strict=strict)
    if result.suite is None:
        raise SuiteDefinitionError(str(path), result.messages())
    return result.suite


def list_suites() -> List[str]:
    """List the ids of the suites bundled with the package."""
    return sorted(entry["id"] for entry in _read_manifest()["suites"])


@functools.lru_cache(maxsize=None)
def load_suite(suite_id: str) -> TestSuite:
    """Load a bundled suite by manifest id.

    Raises:
        ValueError: If *suite_id* is not in the manifest.
        FileNotFoundError: If the manifest references a missing file.
        SuiteDefinitionError: If the bundled document is invalid.
    """
    for entry in _read_manifest()["suites"]:
        if entry["id"] == suite_id:
            full_path = _FIXTURES_DIR / entry["path"]
            if not full_path.exists():
                raise FileNotFoundError(
                    f"Suite file referenced in manifest does not exist: {full_path}"
                )
            return load_suite_document(full_path)
    raise ValueError(
        f"Unknown suite: {suite_id!r}. Bundled suites: {list_suites()}"
    )

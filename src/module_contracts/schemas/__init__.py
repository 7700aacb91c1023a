"""Committed JSON Schema for the suite definition format.

``test_suite.schema.json`` is generated from :class:`TestSuite` by
``python -m module_contracts.schemas.generate`` and read back here by the
suite document validator.
"""
from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Any, Dict, List

SCHEMA_DIR = Path(__file__).parent
SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
SUITE_SCHEMA_NAME = "test_suite"


def schema_id(name: str) -> str:
    """``$id`` stamped on the schema called *name*."""
    return f"module-contracts/{name}"


def list_schemas() -> List[str]:
    """Names of the committed schemas."""
    return sorted(p.name[: -len(".schema.json")] for p in SCHEMA_DIR.glob("*.schema.json"))


def schema_path(name: str) -> Path:
    """Return the committed file for schema *name*.

    Raises:
        FileNotFoundError: If no schema of that name is committed.
    """
    path = SCHEMA_DIR / f"{name}.schema.json"
    if not path.is_file():
        raise FileNotFoundError(
            f"Unknown schema {name!r}; committed schemas: {list_schemas()}"
        )
    return path


def load_schema(name: str) -> Dict[str, Any]:
    """Read schema *name* from disk. Each call returns a fresh dict."""
    with open(schema_path(name), "r", encoding="utf-8") as fh:
        schema: Dict[str, Any] = json.load(fh)
    return schema


@functools.lru_cache(maxsize=None)
def suite_schema() -> Dict[str, Any]:
    """The suite document schema, read once per process.

    The returned dict is shared between callers and must not be mutated.
    """
    return load_schema(SUITE_SCHEMA_NAME)

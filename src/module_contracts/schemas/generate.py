"""Build-time JSON Schema generation script for the suite document format."""
from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Type

from pydantic import BaseModel

from module_contracts.models import TestSuite
from module_contracts.schemas import (
    SCHEMA_DIALECT,
    SCHEMA_DIR,
    SUITE_SCHEMA_NAME,
    schema_id,
)

# Authored documents use the camelCase aliases, so schemas describe
# validation-mode input by alias.
PYDANTIC_MODELS: List[tuple[str, Type[BaseModel]]] = [
    (SUITE_SCHEMA_NAME, TestSuite),
]


def generate_schema(name: str, model: Type[BaseModel]) -> Dict[str, Any]:
    """Generate JSON Schema for a Pydantic model.

    Args:
        name: Schema name for $id field
        model: Pydantic model class

    Returns:
        JSON Schema dict with $schema and $id fields
    """
    schema = model.model_json_schema(by_alias=True, mode="validation")
    schema["$schema"] = SCHEMA_DIALECT
    schema["$id"] = schema_id(name)
    return schema


def schema_to_json(schema: Dict[str, Any]) -> str:
    """Serialize schema to a deterministic JSON string with trailing newline."""
    return json.dumps(schema, indent=2, sort_keys=True) + "\n"


def generate_all_schemas() -> Dict[str, Dict[str, Any]]:
    return {name: generate_schema(name, model) for name, model in PYDANTIC_MODELS}


def write_all_schemas(schemas: Dict[str, Dict[str, Any]]) -> None:
    for name, schema in schemas.items():
        path = SCHEMA_DIR / f"{name}.schema.json"
        path.write_text(schema_to_json(schema), encoding="utf-8")
        print(f"Generated {path}")


def check_drift() -> int:
    """Check if generated schemas match committed files.

    Returns:
        0 if all schemas match, 1 if any drift detected
    """
    schemas = generate_all_schemas()
    drift_detected = False

    for name, schema in schemas.items():
        path = SCHEMA_DIR / f"{name}.schema.json"
        if not path.exists():
            print(f"ERROR: Missing schema file: {path}", file=sys.stderr)
            drift_detected = True
            continue
        if path.read_text(encoding="utf-8") != schema_to_json(schema):
            print(f"ERROR: Schema drift detected in {path}", file=sys.stderr)
            drift_detected = True

    expected_files = {f"{name}.schema.json" for name in schemas}
    actual_files = {p.name for p in SCHEMA_DIR.glob("*.schema.json")}
    for orphan in sorted(actual_files - expected_files):
        print(f"Orphaned schema {orphan}", file=sys.stderr)
        drift_detected = True

    if drift_detected:
        print("\nSchema drift detected. Run without --check to regenerate.", file=sys.stderr)
        return 1

    print(f"All {len(schemas)} schemas are up to date.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate JSON schemas for module-contracts suite documents"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check for schema drift without writing files (CI mode)",
    )
    args = parser.parse_args()

    if args.check:
        return check_drift()

    schemas = generate_all_schemas()
    write_all_schemas(schemas)
    print(f"\nSuccessfully generated {len(schemas)} schemas.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Dual-layer validation for suite definition documents.

This module provides suite document validation combining:
1. Pydantic model validation (primary layer)
2. JSON Schema validation (optional secondary layer)

The validator gracefully degrades if jsonschema is unavailable, unless
strict=True is specified.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from module_contracts.models import TestSuite
from module_contracts.schemas import suite_schema


@dataclass(frozen=True)
class ModelViolation:
    """A violation detected by Pydantic model validation."""

    field: str
    message: str
    violation_type: str
    input_value: object


@dataclass(frozen=True)
class SchemaViolation:
    """A violation detected by JSON Schema validation."""

    json_path: str
    message: str
    validator: str
    validator_value: object
    schema_path: Tuple[Union[str, int], ...]


@dataclass(frozen=True)
class SuiteValidationResult:
    """Result of dual-layer suite document validation."""

    valid: bool
    model_violations: Tuple[ModelViolation, ...]
    schema_violations: Tuple[SchemaViolation, ...]
    schema_check_skipped: bool
    suite: Optional[TestSuite] = None

    def messages(self) -> Tuple[str, ...]:
        """One line per violation, model layer first."""
        return tuple(
            [f"model: {v.field or '<root>'}: {v.message}" for v in self.model_violations]
            + [f"schema: {v.json_path}: {v.message}" for v in self.schema_violations]
        )


def _validate_with_model(
    document: Dict[str, Any],
) -> Tuple[Optional[TestSuite], Tuple[ModelViolation, ...]]:
    try:
        return TestSuite.model_validate(document), ()
    except PydanticValidationError as e:
        violations = []
        for error in e.errors():
            violations.append(
                ModelViolation(
                    field=".".join(str(loc) for loc in error["loc"]),
                    message=error["msg"],
                    violation_type=error["type"],
                    input_value=error.get("input"),
                )
            )
        return None, tuple(violations)


def _validate_with_schema(
    document: Dict[str, Any],
    strict: bool,
) -> Tuple[Tuple[SchemaViolation, ...], bool]:
    """Validate *document* against the committed suite schema.

    Returns:
        Tuple of (violations, skipped) where skipped indicates validation
        was skipped due to missing jsonschema.

    Raises:
        ImportError: If strict=True and jsonschema is unavailable.
    """
    try:
        from jsonschema import Draft202012Validator
    except ImportError:
        if strict:
            raise ImportError(
                "jsonschema is required for strict suite validation. "
                "Install with: pip install 'module-contracts[conformance]'"
            )
        return ((), True)

    validator = Draft202012Validator(suite_schema())
    violations = []
    for error in validator.iter_errors(document):
        json_path = "$" + "".join(
            f"[{p}]" if isinstance(p, int) else f".{p}" for p in error.absolute_path
        )
        violations.append(
            SchemaViolation(
                json_path=json_path,
                message=error.message,
                validator=str(error.validator),
                validator_value=error.validator_value,
                schema_path=tuple(error.absolute_schema_path),
            )
        )
    return (tuple(violations), False)


def validate_suite_document(
    document: Dict[str, Any],
    strict: bool = False,
) -> SuiteValidationResult:
    """Validate a suite definition document.

    Args:
        document: The decoded suite document (camelCase keys).
        strict: If True, require jsonschema and fail if unavailable.
                If False, skip schema validation if jsonschema is missing.

    Returns:
        SuiteValidationResult; ``suite`` holds the parsed TestSuite when the
        model layer accepted the document.

    Raises:
        ImportError: If strict=True and jsonschema is unavailable.
    """
    suite, model_violations = _validate_with_model(document)
    schema_violations, schema_skipped = _validate_with_schema(document, strict)

    valid = not model_violations and (not schema_violations or schema_skipped)
    return SuiteValidationResult(
        valid=valid,
        model_violations=model_violations,
        schema_violations=schema_violations,
        schema_check_skipped=schema_skipped,
        suite=suite if valid else None,
    )

"""Suite documents, bundled suites and assertions for module-contracts.

Run: pytest --pyargs module_contracts.conformance
"""
from module_contracts.conformance.loader import (
    list_suites,
    load_suite,
    load_suite_document,
)
from module_contracts.conformance.pytest_helpers import (
    assert_files_match,
    assert_scenario_passes,
    assert_suite_passes,
)
from module_contracts.conformance.validators import (
    ModelViolation,
    SchemaViolation,
    SuiteValidationResult,
    validate_suite_document,
)

__all__ = [
    "ModelViolation",
    "SchemaViolation",
    "SuiteValidationResult",
    "assert_files_match",
    "assert_scenario_passes",
    "assert_suite_passes",
    "list_suites",
    "load_suite",
    "load_suite_document",
    "validate_suite_document",
]

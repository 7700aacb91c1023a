"""Tests for suite document validation, loading and assertion helpers."""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List
from unittest.mock import patch

import pytest

from module_contracts import (
    ModuleConfig,
    ModuleRegistry,
    Scenario,
    ScenarioRunner,
    SuiteDefinitionError,
    TestSuite,
)
from module_contracts.conformance import (
    ModelViolation,
    SuiteValidationResult,
    assert_files_match,
    assert_scenario_passes,
    assert_suite_passes,
    list_suites,
    load_suite,
    load_suite_document,
    validate_suite_document,
)

BASE = "ops/database/postgresql-config.yaml"


class StaticGenerator:
    def __init__(self, paths: Iterable[str] = ()) -> None:
        self.paths = list(paths)

    def generate(self, config: ModuleConfig) -> List[str]:
        return list(self.paths)


def _make_scenario(name: str = "scenario", expected_files: Iterable[str] = (BASE,)) -> Scenario:
    config = ModuleConfig(
        module_id="db-postgres",
        kind="extension",
        type="database",
        layers=("ops",),
        field_values={"databaseType": "postgresql"},
    )
    return Scenario(name=name, config=config, expected_files=list(expected_files))


def _make_valid_document() -> Dict[str, Any]:
    return {
        "moduleId": "extension-rdbms",
        "moduleName": "RDBMS Database Configuration",
        "scenarios": [
            {
                "name": "postgresql-basic",
                "description": "Basic PostgreSQL database setup",
                "config": {
                    "moduleId": "db-postgres",
                    "kind": "extension",
                    "type": "database",
                    "layers": ["ops"],
                    "enabled": True,
                    "fieldValues": {"databaseType": "postgresql"},
                },
                "expectedFiles": [BASE],
            }
        ],
    }


# ---------------------------------------------------------------------------
# validate_suite_document
# ---------------------------------------------------------------------------


class TestValidateSuiteDocument:
    def test_valid_document(self) -> None:
        result = validate_suite_document(_make_valid_document())
        assert isinstance(result, SuiteValidationResult)
        assert result.valid is True
        assert result.model_violations == ()
        assert isinstance(result.suite, TestSuite)
        assert result.suite.get("postgresql-basic").expected_files == frozenset({BASE})

    def test_missing_module_name(self) -> None:
        document = _make_valid_document()
        del document["moduleName"]
        result = validate_suite_document(document)
        assert result.valid is False
        assert result.suite is None
        assert any(v.field == "moduleName" for v in result.model_violations)

    def test_model_violation_details(self) -> None:
        document = _make_valid_document()
        document["scenarios"][0]["config"]["kind"] = "plugin"
        result = validate_suite_document(document)
        assert result.valid is False
        violation = result.model_violations[0]
        assert isinstance(violation, ModelViolation)
        assert violation.field == "scenarios.0.config.kind"
        assert violation.input_value == "plugin"

    def test_enabled_without_layers_rejected(self) -> None:
        document = _make_valid_document()
        document["scenarios"][0]["config"]["layers"] = []
        assert validate_suite_document(document).valid is False

    def test_unknown_field_values_accepted(self) -> None:
        document = _make_valid_document()
        document["scenarios"][0]["config"]["fieldValues"]["retentionDays"] = 14
        assert validate_suite_document(document).valid is True

    def test_messages(self) -> None:
        document = _make_valid_document()
        del document["moduleId"]
        messages = validate_suite_document(document).messages()
        assert any(m.startswith("model: moduleId:") for m in messages)

    def test_schema_layer_skipped_without_jsonschema(self) -> None:
        with patch.dict(sys.modules, {"jsonschema": None}):
            result = validate_suite_document(_make_valid_document())
        assert result.schema_check_skipped is True
        assert result.valid is True

    def test_strict_requires_jsonschema(self) -> None:
        with patch.dict(sys.modules, {"jsonschema": None}):
            with pytest.raises(ImportError, match="jsonschema is required"):
                validate_suite_document(_make_valid_document(), strict=True)

    def test_schema_layer_reports_violations(self) -> None:
        pytest.importorskip("jsonschema")
        document = _make_valid_document()
        document["scenarios"][0]["expectedFiles"] = "not-a-list"
        result = validate_suite_document(document, strict=True)
        assert result.valid is False
        assert any(
            v.json_path == "$.scenarios[0].expectedFiles" for v in result.schema_violations
        )


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoadSuiteDocument:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "suite.json"
        path.write_text(json.dumps(_make_valid_document()), encoding="utf-8")
        suite = load_suite_document(path)
        assert suite.module_id == "extension-rdbms"

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "suite.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SuiteDefinitionError, match="invalid JSON"):
            load_suite_document(path)

    def test_top_level_must_be_object(self, tmp_path: Path) -> None:
        path = tmp_path / "suite.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(SuiteDefinitionError, match="top level must be an object"):
            load_suite_document(path)

    def test_invalid_document(self, tmp_path: Path) -> None:
        document = _make_valid_document()
        document["scenarios"].append(document["scenarios"][0])
        path = tmp_path / "suite.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        with pytest.raises(SuiteDefinitionError) as exc_info:
            load_suite_document(path)
        assert exc_info.value.source == str(path)
        assert any("duplicate scenario name" in v for v in exc_info.value.violations)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_suite_document(tmp_path / "absent.json")


class TestBundledSuites:
    def test_list_suites(self) -> None:
        assert list_suites() == ["extension-rdbms"]

    def test_load_suite(self) -> None:
        suite = load_suite("extension-rdbms")
        assert suite.module_name == "RDBMS Database Configuration"
        assert [s.name for s in suite.scenarios] == [
            "postgresql-basic",
            "mysql-with-replication",
            "mongodb-cluster",
        ]

    def test_load_suite_cached(self) -> None:
        assert load_suite("extension-rdbms") is load_suite("extension-rdbms")

    def test_unknown_suite(self) -> None:
        with pytest.raises(ValueError, match="Unknown suite"):
            load_suite("extension-queue")

    def test_scenario_module_ids_differ_from_suite(self) -> None:
        suite = load_suite("extension-rdbms")
        assert [s.config.module_id for s in suite.scenarios] == [
            "db-postgres",
            "db-mysql",
            "db-mongo",
        ]


# ---------------------------------------------------------------------------
# pytest helpers
# ---------------------------------------------------------------------------


class TestPytestHelpers:
    def test_assert_files_match_passes(self) -> None:
        result = assert_files_match([BASE], ["./" + BASE])
        assert result.passed

    def test_assert_files_match_fails_with_diff(self) -> None:
        with pytest.raises(AssertionError, match="unexpected: ops/legacy.yaml"):
            assert_files_match([BASE], [BASE, "ops/legacy.yaml"])

    def test_assert_scenario_passes(self) -> None:
        runner = ScenarioRunner(ModuleRegistry({"db-postgres": StaticGenerator([BASE])}))
        outcome = assert_scenario_passes(runner, _make_scenario(expected_files=[BASE]))
        assert outcome.result is not None and outcome.result.passed

    def test_assert_scenario_passes_reports_failure(self) -> None:
        runner = ScenarioRunner(ModuleRegistry({"db-postgres": StaticGenerator([])}))
        with pytest.raises(AssertionError, match="failed"):
            assert_scenario_passes(runner, _make_scenario(expected_files=[BASE]))

    def test_assert_scenario_passes_reports_error(self) -> None:
        runner = ScenarioRunner(ModuleRegistry({}))
        with pytest.raises(AssertionError, match=r"errored \(registry\)"):
            assert_scenario_passes(runner, _make_scenario())

    def test_assert_suite_passes(self) -> None:
        runner = ScenarioRunner(ModuleRegistry({"db-postgres": StaticGenerator([BASE])}))
        suite = TestSuite(
            module_id="extension-test",
            module_name="Test Modules",
            scenarios=(
                _make_scenario("ok", expected_files=[BASE]),
                _make_scenario("bad", expected_files=[]),
            ),
        )
        with pytest.raises(AssertionError, match="1 of 2 scenarios"):
            assert_suite_passes(runner.run(suite))

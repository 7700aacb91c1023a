"""Reusable assertions for module-contracts scenarios.

Consumers can import these in their own generator tests:
    from module_contracts.conformance.pytest_helpers import (
        assert_files_match,
        assert_scenario_passes,
        assert_suite_passes,
    )
"""
from __future__ import annotations

from typing import Iterable

from module_contracts.models import Scenario
from module_contracts.reconcile import ReconciliationResult, reconcile
from module_contracts.runner import (
    ScenarioOutcome,
    ScenarioRunner,
    ScenarioStatus,
    SuiteReport,
)


def assert_files_match(
    expected: Iterable[str],
    actual: Iterable[str],
) -> ReconciliationResult:
    """Assert *actual* is exactly the *expected* path set."""
    result = reconcile(expected, actual)
    if not result.passed:
        raise AssertionError("Output files differ:\n" + result.describe())
    return result


def assert_scenario_passes(
    runner: ScenarioRunner,
    scenario: Scenario,
) -> ScenarioOutcome:
    """Run *scenario* and assert it passed."""
    outcome = runner.run_scenario(scenario)
    if outcome.status is ScenarioStatus.ERRORED:
        raise AssertionError(
            f"Scenario {scenario.name!r} errored "
            f"({outcome.error_kind.value if outcome.error_kind else '?'}): "
            f"{outcome.error_detail}"
        )
    if outcome.status is ScenarioStatus.FAILED:
        assert outcome.result is not None
        raise AssertionError(
            f"Scenario {scenario.name!r} failed:\n" + outcome.result.describe()
        )
    return outcome


def assert_suite_passes(report: SuiteReport) -> None:
    """Assert every scenario in *report* passed."""
    failures = report.failures()
    if failures:
        lines = []
        for outcome in failures:
            if outcome.result is not None:
                lines.append(f"{outcome.name}: failed\n{outcome.result.describe()}")
            else:
                lines.append(f"{outcome.name}: errored: {outcome.error_detail}")
        raise AssertionError(
            f"{len(failures)} of {len(report.outcomes)} scenarios in "
            f"{report.module_id!r} did not pass:\n" + "\n".join(lines)
        )

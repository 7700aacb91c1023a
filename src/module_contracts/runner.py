"""Scenario runner: executes test suites against registered generators.

Each scenario resolves its generator through the ModuleRegistry, invokes it
with the scenario's configuration and reconciles the reported paths against
the declared ``expected_files`` (or the empty set for disabled modules).

Scenarios run on a bounded thread pool. Registry, configuration, generator
and timeout problems become ``errored`` outcomes for that scenario only; the
run always reports one outcome per declared scenario, in declared order.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from ulid import ULID

from module_contracts.models import (
    ConfigurationError,
    GeneratorError,
    ModuleConfig,
    ModuleContractsError,
    RegistryError,
    Scenario,
    TestSuite,
    is_absolute_path,
    normalize_paths,
)
from module_contracts.reconcile import ReconciliationResult, reconcile
from module_contracts.registry import ModuleGenerator, ModuleRegistry
from module_contracts.rules import derive_expected
from module_contracts.settings import RunnerSettings

logger = logging.getLogger("module_contracts.runner")

_POLL_INTERVAL = 0.05


class ScenarioStatus(str, Enum):
    """Verdict for one scenario."""

    PASSED = "passed"
    FAILED = "failed"  # reconciliation mismatch
    ERRORED = "errored"  # registry/generator/configuration/timeout problem


class ErrorKind(str, Enum):
    """Why a scenario errored."""

    REGISTRY = "registry"
    CONFIGURATION = "configuration"
    GENERATOR = "generator"
    TIMEOUT = "timeout"


_ERROR_KINDS: Tuple[Tuple[type, ErrorKind], ...] = (
    (RegistryError, ErrorKind.REGISTRY),
    (ConfigurationError, ErrorKind.CONFIGURATION),
    (GeneratorError, ErrorKind.GENERATOR),
)


def _result_to_dict(result: ReconciliationResult) -> Dict[str, Any]:
    return {
        "passed": result.passed,
        "missing": sorted(result.missing),
        "unexpected": sorted(result.unexpected),
        "matched": sorted(result.matched),
    }


@dataclass(frozen=True)
class ScenarioOutcome:
    """Result of executing one scenario."""

    scenario: Scenario
    status: ScenarioStatus
    result: Optional[ReconciliationResult] = None
    error_kind: Optional[ErrorKind] = None
    error_detail: Optional[str] = None
    warnings: Tuple[str, ...] = ()
    duration_seconds: float = 0.0

    @property
    def name(self) -> str:
        return self.scenario.name

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for reports: ``{name, status, result | error}``."""
        data: Dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "duration_seconds": round(self.duration_seconds, 6),
        }
        if self.result is not None:
            data["result"] = _result_to_dict(self.result)
        if self.error_kind is not None:
            data["error"] = {"kind": self.error_kind.value, "detail": self.error_detail}
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data

    def __repr__(self) -> str:
        """Human-readable representation."""
        return f"ScenarioOutcome(name={self.name}, status={self.status.value})"


@dataclass(frozen=True)
class SuiteReport:
    """All scenario outcomes of one run, in declared scenario order."""

    run_id: str
    module_id: str
    module_name: str
    outcomes: Tuple[ScenarioOutcome, ...]

    def count(self, status: ScenarioStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def counts(self) -> Dict[str, int]:
        return {status.value: self.count(status) for status in ScenarioStatus}

    @property
    def passed(self) -> bool:
        """True iff no scenario failed or errored."""
        return all(o.status is ScenarioStatus.PASSED for o in self.outcomes)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def failures(self) -> Tuple[ScenarioOutcome, ...]:
        """Outcomes that failed or errored."""
        return tuple(o for o in self.outcomes if o.status is not ScenarioStatus.PASSED)

    def outcome(self, name: str) -> ScenarioOutcome:
        """Return the outcome for scenario *name*.

        Raises:
            KeyError: If the report has no such scenario.
        """
        for o in self.outcomes:
            if o.name == name:
                return o
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "module_id": self.module_id,
            "module_name": self.module_name,
            "passed": self.passed,
            "counts": self.counts,
            "scenarios": [o.to_dict() for o in self.outcomes],
        }


def _collect_paths(generator: ModuleGenerator, config: ModuleConfig) -> FrozenSet[str]:
    """Invoke *generator* and normalize the paths it reports.

    Raises:
        GeneratorError: If the generator raises or reports anything other
            than an iterable of relative path strings.
    """
    try:
        produced = generator.generate(config)
        if isinstance(produced, (str, bytes)):
            raise GeneratorError(
                config.module_id,
                f"expected an iterable of paths, got a single {type(produced).__name__}",
            )
        paths: List[Any] = list(produced)
    except GeneratorError:
        raise
    except Exception as e:
        raise GeneratorError(config.module_id, f"{type(e).__name__}: {e}") from e

    non_strings = [p for p in paths if not isinstance(p, str)]
    if non_strings:
        raise GeneratorError(
            config.module_id, f"non-string paths reported: {non_strings!r}"
        )
    absolute = sorted(p for p in paths if is_absolute_path(p))
    if absolute:
        raise GeneratorError(
            config.module_id, f"absolute paths reported: {absolute!r}"
        )
    try:
        return normalize_paths(paths)
    except ValueError as e:
        raise GeneratorError(config.module_id, str(e)) from e


def _derive(config: ModuleConfig) -> FrozenSet[str]:
    """Run the artifact rules, reporting any failure as a ConfigurationError."""
    try:
        return derive_expected(config)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Artifact rules failed for {config.module_id!r}: {type(e).__name__}: {e}"
        ) from e


def _drift_warning(declared: Iterable[str], derived: Iterable[str]) -> Optional[str]:
    declared_set, derived_set = frozenset(declared), frozenset(derived)
    if declared_set == derived_set:
        return None
    return (
        "declared expectedFiles disagree with artifact rules: "
        f"rule-only {sorted(derived_set - declared_set)}, "
        f"fixture-only {sorted(declared_set - derived_set)}"
    )


class ScenarioRunner:
    """Runs scenarios and suites against a ModuleRegistry.

    Args:
        registry: Resolves ``config.module_id`` to a generator.
        settings: Scheduling and diagnostic options (defaults if None).

    Timed-out scenarios are reported as errored while their worker thread is
    left to finish on its own; threads are never killed.
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        settings: Optional[RunnerSettings] = None,
    ) -> None:
        self._registry = registry
        self._settings = settings if settings is not None else RunnerSettings()

    @property
    def settings(self) -> RunnerSettings:
        return self._settings

    def run_scenario(self, scenario: Scenario) -> ScenarioOutcome:
        """Execute one scenario and return its outcome.

        Library errors (registry, configuration, generator) are converted to
        an errored outcome and never raised.
        """
        started = time.monotonic()
        warnings: List[str] = []
        try:
            result = self._evaluate(scenario, warnings)
        except ModuleContractsError as e:
            kind = next(
                (k for exc_type, k in _ERROR_KINDS if isinstance(e, exc_type)),
                ErrorKind.GENERATOR,
            )
            logger.error("Scenario %s errored (%s): %s", scenario.name, kind.value, e)
            return ScenarioOutcome(
                scenario=scenario,
                status=ScenarioStatus.ERRORED,
                error_kind=kind,
                error_detail=str(e),
                warnings=tuple(warnings),
                duration_seconds=time.monotonic() - started,
            )

        status = ScenarioStatus.PASSED if result.passed else ScenarioStatus.FAILED
        if result.passed:
            logger.info("Scenario %s passed", scenario.name)
        else:
            logger.info("Scenario %s failed:\n%s", scenario.name, result.describe())
        return ScenarioOutcome(
            scenario=scenario,
            status=status,
            result=result,
            warnings=tuple(warnings),
            duration_seconds=time.monotonic() - started,
        )

    def _evaluate(self, scenario: Scenario, warnings: List[str]) -> ReconciliationResult:
        config = scenario.config
        generator = self._registry.resolve(config.module_id)

        if config.enabled:
            oracle = scenario.expected_files
        else:
            oracle = frozenset()
            if scenario.expected_files:
                warnings.append(
                    "module is disabled; declared expectedFiles ignored: "
                    f"{sorted(scenario.expected_files)}"
                )

        if self._settings.diagnostic:
            drift = _drift_warning(oracle, _derive(config))
            if drift is not None:
                warnings.append(drift)

        for warning in warnings:
            logger.warning("Scenario %s: %s", scenario.name, warning)

        actual = _collect_paths(generator, config)
        return reconcile(oracle, actual)

    def run(self, suite: TestSuite) -> SuiteReport:
        """Execute every scenario of *suite* on the worker pool.

        Returns:
            SuiteReport with exactly one outcome per declared scenario, in
            declared order regardless of completion order.
        """
        settings = self._settings
        run_id = str(ULID())
        logger.info(
            "Run %s: suite %s (%d scenarios, %d workers)",
            run_id, suite.module_id, len(suite.scenarios), settings.max_workers,
        )

        outcomes: Dict[int, ScenarioOutcome] = {}
        started_at: Dict[int, float] = {}
        deadline = (
            None if settings.run_timeout is None
            else time.monotonic() + settings.run_timeout
        )
        timed = settings.run_timeout is not None or settings.scenario_timeout is not None

        def _work(index: int, scenario: Scenario) -> ScenarioOutcome:
            started_at[index] = time.monotonic()
            return self.run_scenario(scenario)

        executor = ThreadPoolExecutor(
            max_workers=settings.max_workers,
            thread_name_prefix="module-contracts",
        )
        try:
            pending: Dict[Future[ScenarioOutcome], int] = {
                executor.submit(_work, index, scenario): index
                for index, scenario in enumerate(suite.scenarios)
            }
            while pending:
                done, _ = wait(
                    pending,
                    timeout=_POLL_INTERVAL if timed else None,
                    return_when=FIRST_COMPLETED,
                )
                for future in done:
                    index = pending.pop(future)
                    outcomes[index] = future.result()
                if timed:
                    self._expire(suite, pending, started_at, deadline, outcomes)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        report = SuiteReport(
            run_id=run_id,
            module_id=suite.module_id,
            module_name=suite.module_name,
            outcomes=tuple(outcomes[i] for i in range(len(suite.scenarios))),
        )
        logger.info("Run %s finished: %s", run_id, report.counts)
        return report

    def _expire(
        self,
        suite: TestSuite,
        pending: Dict[Future[ScenarioOutcome], int],
        started_at: Dict[int, float],
        deadline: Optional[float],
        outcomes: Dict[int, ScenarioOutcome],
    ) -> None:
        """Record timeouts for scenarios past their budget and drop them from *pending*."""
        now = time.monotonic()
        scenario_timeout = self._settings.scenario_timeout
        for future, index in list(pending.items()):
            scenario = suite.scenarios[index]
            start = started_at.get(index)
            if start is None:
                # cancel() only succeeds for work that has not started
                if deadline is not None and now >= deadline and future.cancel():
                    del pending[future]
                    outcomes[index] = _timed_out(
                        scenario, "run timeout reached before the scenario started", 0.0
                    )
            elif scenario_timeout is not None and now - start >= scenario_timeout:
                del pending[future]
                outcomes[index] = _timed_out(
                    scenario,
                    f"scenario exceeded its {scenario_timeout}s timeout",
                    now - start,
                )


def _timed_out(scenario: Scenario, detail: str, elapsed: float) -> ScenarioOutcome:
    logger.warning("Scenario %s timed out: %s", scenario.name, detail)
    return ScenarioOutcome(
        scenario=scenario,
        status=ScenarioStatus.ERRORED,
        error_kind=ErrorKind.TIMEOUT,
        error_detail=detail,
        duration_seconds=elapsed,
    )

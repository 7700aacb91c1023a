"""
module-contracts: contract-validation harness for module-based infrastructure generators.

A scenario pairs a module configuration with the exact set of artifact paths
its generator must emit. The harness runs scenarios against registered
generators and reconciles actual output against the expected set.

Example:
    >>> from module_contracts import reconcile
    >>> result = reconcile(
    ...     ["ops/database/mysql-config.yaml"],
    ...     ["./ops/database/mysql-config.yaml", "ops/database/legacy.yaml"],
    ... )
    >>> result.passed
    False
    >>> sorted(result.unexpected)
    ['ops/database/legacy.yaml']

Components:
    Configuration model: ModuleConfig, Scenario, TestSuite
    Conditional artifact rules: derive_expected, ArtifactRule
    Output set reconciliation: reconcile, ReconciliationResult
    Module registry: ModuleRegistry, ModuleGenerator
    Scenario runner: ScenarioRunner, SuiteReport, RunnerSettings
    Suite documents and bundled suites: module_contracts.conformance
"""

__version__ = "1.0.0"

# Core data models
from module_contracts.models import (
    ModuleKind,
    ModuleConfig,
    Scenario,
    TestSuite,
    ModuleContractsError,
    ConfigurationError,
    RegistryError,
    GeneratorError,
    SuiteDefinitionError,
    is_absolute_path,
    normalize_path,
    normalize_paths,
)

# Conditional artifact rules
from module_contracts.rules import (
    ArtifactRule,
    DATABASE_FIELDS,
    DATABASE_RULES,
    DATABASE_TYPES,
    derive_expected,
    flag_enabled,
    known_module_types,
    rule_table,
)

# Reconciliation
from module_contracts.reconcile import (
    ReconciliationResult,
    reconcile,
)

# Registry
from module_contracts.registry import (
    ModuleGenerator,
    ModuleRegistry,
)

# Runner configuration
from module_contracts.settings import RunnerSettings

# Scenario runner
from module_contracts.runner import (
    ErrorKind,
    ScenarioOutcome,
    ScenarioRunner,
    ScenarioStatus,
    SuiteReport,
)

__all__ = [
    "__version__",
    # Core data models
    "ModuleKind",
    "ModuleConfig",
    "Scenario",
    "TestSuite",
    "ModuleContractsError",
    "ConfigurationError",
    "RegistryError",
    "GeneratorError",
    "SuiteDefinitionError",
    "is_absolute_path",
    "normalize_path",
    "normalize_paths",
    # Conditional artifact rules
    "ArtifactRule",
    "DATABASE_FIELDS",
    "DATABASE_RULES",
    "DATABASE_TYPES",
    "derive_expected",
    "flag_enabled",
    "known_module_types",
    "rule_table",
    # Reconciliation
    "ReconciliationResult",
    "reconcile",
    # Registry
    "ModuleGenerator",
    "ModuleRegistry",
    # Runner
    "RunnerSettings",
    "ErrorKind",
    "ScenarioOutcome",
    "ScenarioRunner",
    "ScenarioStatus",
    "SuiteReport",
]

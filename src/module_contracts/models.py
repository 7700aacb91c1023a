"""Core data models for module-contracts."""
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)


def normalize_path(path: object) -> str:
    """Normalize an artifact path to canonical form.

    - Backslashes become forward slashes
    - Empty and ``.`` segments are dropped (no ``./`` prefix, no trailing
      or doubled separators)
    - Case is preserved

    Raises:
        ValueError: If the input is not a string or normalizes to nothing.
    """
    if not isinstance(path, str):
        raise ValueError(f"path must be a string; got {type(path).__name__}")
    segments = [s for s in path.replace("\\", "/").split("/") if s not in ("", ".")]
    if not segments:
        raise ValueError(f"path normalizes to an empty string: {path!r}")
    return "/".join(segments)


def normalize_paths(paths: Iterable[str]) -> FrozenSet[str]:
    """Normalize every path in *paths* into a frozenset."""
    return frozenset(normalize_path(p) for p in paths)


def is_absolute_path(path: str) -> bool:
    """True for paths rooted at a separator or at a drive such as ``C:/``."""
    return path.startswith(("/", "\\")) or path[1:3] in (":/", ":\\")


class ModuleKind(str, Enum):
    """Kinds of generator modules."""

    EXTENSION = "extension"
    CORE = "core"


class ModuleConfig(BaseModel):
    """Declarative input for one generator module."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    module_id: str = Field(
        ...,
        alias="moduleId",
        min_length=1,
        description="Identifier the module registry resolves to a generator",
    )
    kind: ModuleKind = Field(..., description="Module kind (e.g., 'extension')")
    type: str = Field(
        ...,
        min_length=1,
        description="Module type selecting the conditional rule table",
    )
    layers: Tuple[str, ...] = Field(
        default=(),
        description="Target deployment layers, ordered and without duplicates",
    )
    enabled: bool = Field(True, description="Disabled modules must produce nothing")
    field_values: Mapping[str, Any] = Field(
        default_factory=dict,
        alias="fieldValues",
        validate_default=True,
        description="Type-specific values; unknown keys pass through untouched",
    )

    @field_validator("layers")
    @classmethod
    def _check_layers(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if any(not layer for layer in v):
            raise ValueError("layer names must be non-empty")
        if len(set(v)) != len(v):
            raise ValueError(f"layers must not repeat: {list(v)}")
        return v

    @field_validator("field_values")
    @classmethod
    def _freeze_field_values(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))

    @field_serializer("field_values")
    def _dump_field_values(self, v: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(v)

    @model_validator(mode="after")
    def _check_enabled_layers(self) -> "ModuleConfig":
        if self.enabled and not self.layers:
            raise ValueError("an enabled module requires at least one layer")
        return self

    def flag(self, key: str) -> bool:
        """Return True only when *key* is present and set to boolean True."""
        return self.field_values.get(key) is True

    def __repr__(self) -> str:
        """Human-readable representation."""
        return (
            f"ModuleConfig(module_id={self.module_id}, type={self.type}, "
            f"layers={list(self.layers)}, enabled={self.enabled})"
        )


class Scenario(BaseModel):
    """One named case pairing a configuration with its expected artifacts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Unique within a suite")
    description: str = Field(default="", description="Human-readable summary")
    config: ModuleConfig = Field(..., description="Configuration handed to the generator")
    expected_files: FrozenSet[str] = Field(
        default_factory=frozenset,
        alias="expectedFiles",
        description="Relative artifact paths the generator must emit",
    )

    @field_validator("expected_files", mode="before")
    @classmethod
    def _normalize_expected_files(cls, v: object) -> object:
        if not isinstance(v, (list, tuple, set, frozenset)):
            return v
        normalized: Dict[str, str] = {}
        for raw in v:
            if isinstance(raw, str) and is_absolute_path(raw):
                raise ValueError(f"expected file must be a relative path: {raw!r}")
            path = normalize_path(raw)
            if path in normalized:
                raise ValueError(
                    f"duplicate expected file {path!r} "
                    f"(from {normalized[path]!r} and {raw!r})"
                )
            normalized[path] = raw
        return frozenset(normalized)

    def __repr__(self) -> str:
        """Human-readable representation."""
        return (
            f"Scenario(name={self.name}, module_id={self.config.module_id}, "
            f"expected={len(self.expected_files)} files)"
        )


class TestSuite(BaseModel):
    """An ordered group of scenarios for one module family."""

    __test__ = False  # not a pytest class

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    module_id: str = Field(..., alias="moduleId", min_length=1)
    module_name: str = Field(..., alias="moduleName", min_length=1)
    scenarios: Tuple[Scenario, ...] = Field(default=())

    @field_validator("scenarios")
    @classmethod
    def _check_unique_names(cls, v: Tuple[Scenario, ...]) -> Tuple[Scenario, ...]:
        seen: set[str] = set()
        for scenario in v:
            if scenario.name in seen:
                raise ValueError(f"duplicate scenario name: {scenario.name!r}")
            seen.add(scenario.name)
        return v

    def get(self, name: str) -> Scenario:
        """Return the scenario called *name*.

        Raises:
            KeyError: If the suite has no such scenario.
        """
        for scenario in self.scenarios:
            if scenario.name == name:
                return scenario
        raise KeyError(name)

    def __repr__(self) -> str:
        """Human-readable representation."""
        return (
            f"TestSuite(module_id={self.module_id}, "
            f"scenarios={[s.name for s in self.scenarios]})"
        )


# Custom Exceptions
class ModuleContractsError(Exception):
    """Base exception for all library errors."""
    pass


class ConfigurationError(ModuleContractsError):
    """The rule evaluator cannot classify a configuration."""
    pass


class RegistryError(ModuleContractsError):
    """No generator is registered for a module id."""

    def __init__(self, module_id: str, known: Iterable[str] = ()) -> None:
        self.module_id = module_id
        super().__init__(
            f"No generator registered for module {module_id!r}. "
            f"Known modules: {sorted(known)}"
        )


class GeneratorError(ModuleContractsError):
    """The external generator raised or returned something unusable."""

    def __init__(self, module_id: str, message: str) -> None:
        self.module_id = module_id
        super().__init__(f"Generator for {module_id!r} failed: {message}")


class SuiteDefinitionError(ModuleContractsError):
    """A suite document does not conform to the suite format."""

    def __init__(self, source: str, violations: Tuple[str, ...]) -> None:
        self.source = source
        self.violations = violations
        super().__init__(
            f"Invalid suite definition {source}: {'; '.join(violations)}"
        )

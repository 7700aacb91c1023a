"""Module registry: resolves module ids to generator implementations."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, List, Mapping, Protocol, runtime_checkable

from module_contracts.models import ModuleConfig, RegistryError


@runtime_checkable
class ModuleGenerator(Protocol):
    """External generation engine for one module.

    ``generate`` returns the relative paths of the artifacts it produced.
    """

    def generate(self, config: ModuleConfig) -> Iterable[str]:
        ...


class ModuleRegistry:
    """Read-only mapping from module id to generator."""

    def __init__(self, generators: Mapping[str, ModuleGenerator]) -> None:
        for module_id, generator in generators.items():
            if not module_id:
                raise ValueError("module id must be non-empty")
            if not isinstance(generator, ModuleGenerator):
                raise TypeError(
                    f"Generator for {module_id!r} has no generate() method: "
                    f"{type(generator).__name__}"
                )
        self._generators: Mapping[str, ModuleGenerator] = MappingProxyType(dict(generators))

    def resolve(self, module_id: str) -> ModuleGenerator:
        """Return the generator registered for *module_id*.

        Raises:
            RegistryError: If no generator is registered.
        """
        try:
            return self._generators[module_id]
        except KeyError:
            raise RegistryError(module_id, self._generators) from None

    def module_ids(self) -> List[str]:
        return sorted(self._generators)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._generators

    def __len__(self) -> int:
        return len(self._generators)

    def __repr__(self) -> str:
        return f"ModuleRegistry(modules={self.module_ids()})"

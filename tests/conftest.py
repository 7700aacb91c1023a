"""Shared pytest fixtures for all tests."""
from __future__ import annotations

from typing import List

import pytest

from module_contracts import ModuleConfig, ModuleRegistry, TestSuite
from module_contracts.conformance import load_suite


class _DeclaredFilesGenerator:
    """Reports the files a scenario declares, regardless of the config."""

    def __init__(self, paths: List[str]) -> None:
        self.paths = paths

    def generate(self, config: ModuleConfig) -> List[str]:
        return list(self.paths)


@pytest.fixture
def rdbms_suite() -> TestSuite:
    """The bundled extension-rdbms suite."""
    return load_suite("extension-rdbms")


@pytest.fixture
def declared_registry(rdbms_suite: TestSuite) -> ModuleRegistry:
    """Registry whose generators emit each rdbms scenario's declared files."""
    return ModuleRegistry({
        s.config.module_id: _DeclaredFilesGenerator(sorted(s.expected_files))
        for s in rdbms_suite.scenarios
    })

"""Unit tests for runner settings."""

import pydantic
import pytest

from module_contracts import RunnerSettings


class TestRunnerSettings:
    def test_defaults(self) -> None:
        settings = RunnerSettings()
        assert settings.max_workers == 4
        assert settings.scenario_timeout is None
        assert settings.run_timeout is None
        assert settings.diagnostic is False

    @pytest.mark.parametrize(
        "overrides",
        [{"max_workers": 0}, {"scenario_timeout": 0}, {"run_timeout": -1.0}],
    )
    def test_invalid_values_rejected(self, overrides: dict) -> None:
        with pytest.raises(pydantic.ValidationError):
            RunnerSettings(**overrides)

    def test_frozen(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            RunnerSettings().max_workers = 2  # type: ignore[misc]


class TestFromEnv:
    def test_empty_environment_gives_defaults(self) -> None:
        assert RunnerSettings.from_env({}) == RunnerSettings()

    def test_reads_prefixed_variables(self) -> None:
        settings = RunnerSettings.from_env({
            "MODULE_CONTRACTS_MAX_WORKERS": "8",
            "MODULE_CONTRACTS_SCENARIO_TIMEOUT": "2.5",
            "MODULE_CONTRACTS_RUN_TIMEOUT": " 30 ",
            "MODULE_CONTRACTS_DIAGNOSTIC": "yes",
        })
        assert settings == RunnerSettings(
            max_workers=8, scenario_timeout=2.5, run_timeout=30.0, diagnostic=True
        )

    @pytest.mark.parametrize("raw", ["0", "false", "off", ""])
    def test_diagnostic_falsy(self, raw: str) -> None:
        settings = RunnerSettings.from_env({"MODULE_CONTRACTS_DIAGNOSTIC": raw})
        assert settings.diagnostic is False

    @pytest.mark.parametrize("raw", ["1", "true", "YES", " on "])
    def test_diagnostic_truthy(self, raw: str) -> None:
        settings = RunnerSettings.from_env({"MODULE_CONTRACTS_DIAGNOSTIC": raw})
        assert settings.diagnostic is True

    @pytest.mark.parametrize("raw", ["garbage", "2", "enabled"])
    def test_invalid_diagnostic_raises(self, raw: str) -> None:
        with pytest.raises(pydantic.ValidationError, match="diagnostic"):
            RunnerSettings.from_env({"MODULE_CONTRACTS_DIAGNOSTIC": raw})

    def test_blank_numeric_ignored(self) -> None:
        settings = RunnerSettings.from_env({"MODULE_CONTRACTS_SCENARIO_TIMEOUT": "  "})
        assert settings.scenario_timeout is None

    def test_invalid_value_raises(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            RunnerSettings.from_env({"MODULE_CONTRACTS_MAX_WORKERS": "many"})

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MODULE_CONTRACTS_MAX_WORKERS", "2")
        assert RunnerSettings.from_env().max_workers == 2

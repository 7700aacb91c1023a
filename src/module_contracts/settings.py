"""Runner configuration.

Values come from keyword arguments or from ``MODULE_CONTRACTS_*``
environment variables:

    MODULE_CONTRACTS_MAX_WORKERS       worker pool size (default 4)
    MODULE_CONTRACTS_SCENARIO_TIMEOUT  per-scenario budget in seconds
    MODULE_CONTRACTS_RUN_TIMEOUT       whole-run budget in seconds
    MODULE_CONTRACTS_DIAGNOSTIC        boolean (1/0, true/false, yes/no, on/off)
                                       to cross-check fixtures against the
                                       artifact rules

Blank variables are ignored.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "MODULE_CONTRACTS_"


class RunnerSettings(BaseModel):
    """Scheduling and diagnostic options for a ScenarioRunner."""

    model_config = ConfigDict(frozen=True)

    max_workers: int = Field(4, ge=1, description="Parallel scenario workers")
    scenario_timeout: Optional[float] = Field(
        None, gt=0, description="Seconds one scenario may run (None = unbounded)"
    )
    run_timeout: Optional[float] = Field(
        None,
        gt=0,
        description="Seconds after which unstarted scenarios are abandoned",
    )
    diagnostic: bool = Field(
        False,
        description="Cross-check declared files against the artifact rules",
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RunnerSettings":
        """Build settings from ``MODULE_CONTRACTS_*`` variables over defaults.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for field in cls.model_fields:
            raw = env.get(ENV_PREFIX + field.upper())
            if raw is not None and raw.strip():
                values[field] = raw.strip()
        return cls.model_validate(values)

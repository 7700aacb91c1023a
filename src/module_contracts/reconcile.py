"""Expected vs. actual output-set reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List

from module_contracts.models import normalize_paths


@dataclass(frozen=True)
class ReconciliationResult:
    """Partition of ``expected | actual`` into missing, unexpected and matched."""

    missing: FrozenSet[str]
    unexpected: FrozenSet[str]
    matched: FrozenSet[str]
    passed: bool

    def describe(self) -> str:
        """Render a sorted, human-readable diff."""
        if self.passed:
            return f"all {len(self.matched)} expected files present"
        lines: List[str] = []
        for path in sorted(self.missing):
            lines.append(f"  missing:    {path}")
        for path in sorted(self.unexpected):
            lines.append(f"  unexpected: {path}")
        lines.append(f"  matched:    {len(self.matched)} file(s)")
        return "\n".join(lines)


def reconcile(expected: Iterable[str], actual: Iterable[str]) -> ReconciliationResult:
    """Compare an expected path set against a generator's actual output.

    Both sides are normalized (forward slashes, no ``./`` prefix, no trailing
    slash) before an exact, case-sensitive comparison.

    Args:
        expected: Paths the scenario requires.
        actual: Paths the generator reported.

    Returns:
        ReconciliationResult with ``passed`` true iff nothing is missing or
        unexpected.

    Raises:
        ValueError: If a path is not a string or normalizes to nothing.
    """
    expected_set = normalize_paths(expected)
    actual_set = normalize_paths(actual)
    missing = expected_set - actual_set
    unexpected = actual_set - expected_set
    return ReconciliationResult(
        missing=missing,
        unexpected=unexpected,
        matched=expected_set & actual_set,
        passed=not missing and not unexpected,
    )

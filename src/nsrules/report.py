"""Run-level accumulator for violations, warnings and counters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from nsrules.scanner import Violation


@dataclass
class Report:
    violations: list[Violation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    units_checked: int = 0
    rules_matched: int = 0
    units_skipped: int = 0

    def candidate_units(self, count: int) -> None:
        self.units_checked = count

    def unit_skipped(self, warning: str) -> None:
        self.warnings.append(warning)
        self.units_skipped += 1

    def rule_matched(self) -> None:
        self.rules_matched += 1

    def extend_violations(self, violations: Iterable[Violation]) -> None:
        self.violations.extend(violations)

    def warn(self, warning: str) -> None:
        self.warnings.append(warning)

    def exit_status(self) -> int:
        return exit_status(self)


def exit_status(report: Report) -> int:
    """0 when the run found no violations, 1 otherwise."""
    return 0 if not report.violations else 1


def pluralise(count: int) -> str:
    return "" if count == 1 else "s"

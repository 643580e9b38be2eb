"""Applying compiled rules to every unit of a corpus."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from nsrules.corpus import Corpus, SourceUnit, read_unit_text
from nsrules.report import Report
from nsrules.rules import CompiledRule, Rule, compile_rules, first_applicable
from nsrules.scanner import CONTEXT_BREAKS, Violation, scan

Reader = Callable[[SourceUnit], str]


@dataclass(frozen=True)
class UnitOutcome:
    unit: SourceUnit
    matched: bool
    violations: tuple[Violation, ...] = ()
    warning: str | None = None


def check_unit(
    unit: SourceUnit,
    rules: Sequence[CompiledRule],
    *,
    reader: Reader = read_unit_text,
    context_breaks: int = CONTEXT_BREAKS,
) -> UnitOutcome:
    # A unit is governed by the first matching rule only.
    rule = first_applicable(rules, unit.namespace)
    if rule is None:
        return UnitOutcome(unit=unit, matched=False)
    try:
        code = reader(unit)
    except (OSError, UnicodeError) as error:
        return UnitOutcome(
            unit=unit,
            matched=True,
            warning=f"failed to read file {unit.path}: {error}",
        )
    violations = tuple(scan(unit, code, rule, context_breaks=context_breaks))
    return UnitOutcome(unit=unit, matched=True, violations=violations)


def _record(report: Report, outcome: UnitOutcome) -> None:
    if not outcome.matched:
        return
    report.rule_matched()
    if outcome.warning is not None:
        report.unit_skipped(outcome.warning)
        return
    report.extend_violations(outcome.violations)


def apply_rules(
    rules: Sequence[CompiledRule],
    corpus: Corpus,
    report: Report,
    *,
    reader: Reader = read_unit_text,
    context_breaks: int = CONTEXT_BREAKS,
    jobs: int = 1,
) -> Report:
    """Scan each unit with its first matching rule and record the results.

    With ``jobs`` above 1 units are checked on a thread pool; outcomes are still
    recorded in corpus order so the report is the same as a sequential run.
    """

    def _check(unit: SourceUnit) -> UnitOutcome:
        return check_unit(unit, rules, reader=reader, context_breaks=context_breaks)

    outcomes: Iterable[UnitOutcome]
    if jobs > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            outcomes = list(executor.map(_check, corpus))
    else:
        outcomes = map(_check, corpus)
    for outcome in outcomes:
        _record(report, outcome)
    return report


def run(
    corpus: Corpus,
    rules: Iterable[Rule],
    *,
    report: Report | None = None,
    reader: Reader = read_unit_text,
    context_breaks: int = CONTEXT_BREAKS,
    jobs: int = 1,
) -> Report:
    """Compile ``rules`` against the finished corpus, then apply them.

    A supplied ``report`` keeps any ``units_checked`` count already recorded by
    discovery; otherwise it is set from the corpus.
    """
    if report is None:
        report = Report()
    if report.units_checked == 0:
        report.candidate_units(len(corpus))
    compiled = compile_rules(rules, corpus)
    return apply_rules(
        compiled,
        corpus,
        report,
        reader=reader,
        context_breaks=context_breaks,
        jobs=jobs,
    )

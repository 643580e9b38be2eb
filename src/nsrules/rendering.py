"""Text and JSON renderings of a report."""

from __future__ import annotations

import json
from typing import Iterable

import typer

from nsrules.report import Report, exit_status, pluralise
from nsrules.rules import CompiledRule
from nsrules.scanner import Violation
from nsrules.schema import CompiledRuleDTO, ReportCountsDTO, ReportDTO, ViolationDTO

VIOLATION_LABEL = "this reference is not allowed"


def _style(text: str, color: bool, **styles: object) -> str:
    if not color:
        return text
    return typer.style(text, **styles)


def render_violation(violation: Violation, *, color: bool = False) -> str:
    headline = _style(
        f"× '{violation.namespace}' is not allowed to reference '{violation.reference}'",
        color,
        fg="red",
    )
    lines = violation.snippet.split("\n")
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    last_line = violation.snippet_line + len(lines) - 1
    width = len(str(last_line))
    gutter = " " * width
    out = [
        headline,
        f"{gutter} --> {violation.path}:{violation.line}:{violation.column}",
        f"{gutter} |",
    ]
    for number, text in enumerate(lines, start=violation.snippet_line):
        out.append(f"{number:>{width}} | {text}".rstrip())
        if number == violation.line:
            underline = " " * (violation.column - 1) + "^" * len(violation.reference)
            out.append(
                f"{gutter} | "
                + _style(f"{underline} {VIOLATION_LABEL}", color, fg="magenta", bold=True)
            )
    return "\n".join(out)


def render_summary(report: Report, *, color: bool = False) -> str:
    found = len(report.violations)
    if found == 0:
        status = _style("All checks passed", color, fg="green")
    else:
        status = _style(f"Found {found} rule violation{pluralise(found)}", color, fg="red")
    warnings = len(report.warnings)
    return "\n".join(
        [
            status,
            f"{report.units_checked:3} file{pluralise(report.units_checked)} checked",
            f"{report.rules_matched:3} namespace{pluralise(report.rules_matched)} matched a rule",
            f"{warnings:3} warning{pluralise(warnings)}",
            f"{report.units_skipped:3} file{pluralise(report.units_skipped)} skipped",
        ]
    )


def render_text(report: Report, *, color: bool = False) -> str:
    sections: list[str] = []
    if report.warnings:
        sections.append(
            "\n".join(["Warnings:", *(f"  {warning}" for warning in report.warnings)])
        )
    sections.extend(render_violation(violation, color=color) for violation in report.violations)
    sections.append(render_summary(report, color=color))
    return "\n\n".join(sections) + "\n"


def report_payload(report: Report) -> ReportDTO:
    return ReportDTO(
        violations=[
            ViolationDTO(
                namespace=violation.namespace,
                path=str(violation.path),
                reference=violation.reference,
                span=violation.span,
                context=violation.context,
                line=violation.line,
                column=violation.column,
            )
            for violation in report.violations
        ],
        warnings=list(report.warnings),
        counts=ReportCountsDTO(
            units_checked=report.units_checked,
            rules_matched=report.rules_matched,
            units_skipped=report.units_skipped,
            warnings=len(report.warnings),
            violations=len(report.violations),
        ),
        exit_status=exit_status(report),
    )


def render_json(report: Report) -> str:
    return json.dumps(report_payload(report).model_dump(), indent=2, sort_keys=True)


def render_compiled_rules(rules: Iterable[CompiledRule]) -> str:
    blocks: list[str] = []
    for rule in rules:
        if rule.forbidden:
            body = "\n".join(f"  - {namespace}" for namespace in rule.forbidden)
        else:
            body = "  (no forbidden namespaces)"
        blocks.append(f"{rule.namespace} may not reference:\n{body}")
    if not blocks:
        return "No rules with an effect.\n"
    return "\n\n".join(blocks) + "\n"


def compiled_rules_json(rules: Iterable[CompiledRule]) -> str:
    payload = [
        CompiledRuleDTO(namespace=rule.namespace.text, forbidden=list(rule.forbidden)).model_dump()
        for rule in rules
    ]
    return json.dumps(payload, indent=2, sort_keys=True)

"""Locating forbidden namespace references inside raw source text.

Detection is a substring search: a forbidden namespace is reported wherever
its text appears, including comments and string literals.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from nsrules.corpus import SourceUnit
    from nsrules.rules import CompiledRule

CONTEXT_BREAKS = 5


@dataclass(frozen=True)
class Violation:
    """One disallowed reference found in a guarded unit.

    ``span`` locates the reference and ``context`` the surrounding lines, both
    as ``[start, end)`` offsets into the unit's decoded text. Offsets count
    code points (``str`` indices), not UTF-8 bytes. ``snippet`` is the context
    text itself and ``snippet_line`` the 1-based line it starts on.
    """

    namespace: str
    path: Path
    reference: str
    span: tuple[int, int]
    context: tuple[int, int]
    line: int
    column: int
    snippet: str
    snippet_line: int

    @property
    def start(self) -> int:
        return self.span[0]

    @property
    def end(self) -> int:
        return self.span[1]


def context_start(code: str, start: int, breaks: int = CONTEXT_BREAKS) -> int:
    """Offset just past the ``breaks``-th newline before ``start``, else 0."""
    index = start
    for _ in range(breaks):
        index = code.rfind("\n", 0, index)
        if index < 0:
            return 0
    return index + 1


def context_end(code: str, end: int, breaks: int = CONTEXT_BREAKS) -> int:
    """Offset of the ``breaks``-th newline at or after ``end``, else the length."""
    index = end - 1
    for _ in range(breaks):
        index = code.find("\n", index + 1)
        if index < 0:
            return len(code)
    return index


def _line_number(code: str, offset: int) -> int:
    return code.count("\n", 0, offset) + 1


def scan(
    unit: SourceUnit,
    code: str,
    rule: CompiledRule,
    *,
    context_breaks: int = CONTEXT_BREAKS,
) -> Iterator[Violation]:
    if context_breaks < 1:
        raise ValueError("context_breaks must be at least 1")
    for match in rule.checker.finditer(code):
        start, end = match.span()
        snippet_start = context_start(code, start, context_breaks)
        snippet_end = context_end(code, end, context_breaks)
        yield Violation(
            namespace=unit.namespace,
            path=unit.path,
            reference=match.group(0),
            span=(start, end),
            context=(snippet_start, snippet_end),
            line=_line_number(code, start),
            column=start - (code.rfind("\n", 0, start) + 1) + 1,
            snippet=code[snippet_start:snippet_end],
            snippet_line=_line_number(code, snippet_start),
        )

"""Namespace pattern compilation.

A pattern is a dotted namespace in which ``*`` stands for one or more symbol
characters inside a segment. A trailing ``.*`` segment makes the pattern
recursive: it matches the literal prefix followed by at least one further
segment, so ``shipping.use-case.*`` matches ``shipping.use-case.routing`` and
``shipping.use-case.routing.route`` but not ``shipping.use-case`` itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from nsrules.exceptions import InvalidPattern

# Characters allowed in EDN symbols. Segments exclude '.', the remainder of a
# recursive pattern includes it.
_SYMBOL_CHARS = r"A-Za-z0-9*+!\-_?$%&=<>"
SEGMENT_WILDCARD = rf"[{_SYMBOL_CHARS}]+"
REMAINDER_WILDCARD = rf"[{_SYMBOL_CHARS}.]+"


@dataclass(frozen=True)
class NamespacePattern:
    text: str
    recursive: bool
    regex: re.Pattern[str]

    def matches(self, namespace: str) -> bool:
        return self.regex.fullmatch(namespace) is not None

    def __str__(self) -> str:
        return self.text


def _validate(text: str) -> None:
    if text == "":
        raise InvalidPattern(text, "namespace patterns cannot be empty")
    if " " in text:
        raise InvalidPattern(text, "namespace patterns cannot contain spaces")
    if text.startswith(".") or text.endswith("."):
        raise InvalidPattern(
            text, "namespace patterns cannot start with or end with '.'"
        )


def _segment_expression(segment: str) -> str:
    return SEGMENT_WILDCARD.join(re.escape(part) for part in segment.split("*"))


def compile_pattern(text: str) -> NamespacePattern:
    _validate(text)
    segments = text.split(".")
    recursive = len(segments) > 1 and segments[-1] == "*"
    if recursive:
        segments = segments[:-1]
    expression = r"\.".join(_segment_expression(segment) for segment in segments)
    if recursive:
        expression += r"\." + REMAINDER_WILDCARD
    return NamespacePattern(text=text, recursive=recursive, regex=re.compile(expression))


def matches_any(patterns: Iterable[NamespacePattern], namespace: str) -> bool:
    return any(pattern.matches(namespace) for pattern in patterns)

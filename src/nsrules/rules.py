"""Namespace rules and their compilation against a corpus."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from nsrules.corpus import Corpus
from nsrules.patterns import NamespacePattern, matches_any

_NEVER_MATCHES = re.compile(r"(?!)")


def is_permitted(
    namespace: str,
    guard: NamespacePattern,
    allow: Sequence[NamespacePattern],
    *,
    permit_self_reference: bool = True,
) -> bool:
    if matches_any(allow, namespace):
        return True
    return permit_self_reference and guard.matches(namespace)


@dataclass(frozen=True)
class Rule:
    """Restricts namespaces matching ``namespace`` to referencing ``allow``.

    With ``permit_self_reference`` a guarded namespace may also reference
    anything the guard itself matches, whether or not the allow list names it.
    """

    namespace: NamespacePattern
    allow: tuple[NamespacePattern, ...]
    permit_self_reference: bool = True

    def __post_init__(self) -> None:
        if not self.allow:
            raise ValueError(f"the rule for '{self.namespace}' has no effect")

    def permits(self, namespace: str) -> bool:
        return is_permitted(
            namespace,
            self.namespace,
            self.allow,
            permit_self_reference=self.permit_self_reference,
        )


@dataclass(frozen=True)
class CompiledRule:
    namespace: NamespacePattern
    forbidden: tuple[str, ...]
    checker: re.Pattern[str]

    def applies_to(self, namespace: str) -> bool:
        return self.namespace.matches(namespace)


def resolve_forbidden(
    guard: NamespacePattern,
    allow: Sequence[NamespacePattern],
    corpus: Corpus,
    *,
    permit_self_reference: bool = True,
) -> tuple[str, ...]:
    """Corpus namespaces that neither the allow list nor the guard cover.

    Distinct names are returned in the order they first appear in the corpus.
    """
    forbidden: dict[str, None] = {}
    for namespace in corpus.namespaces():
        if namespace in forbidden:
            continue
        if is_permitted(
            namespace, guard, allow, permit_self_reference=permit_self_reference
        ):
            continue
        forbidden[namespace] = None
    return tuple(forbidden)


def forbidden_matcher(forbidden: Sequence[str]) -> re.Pattern[str]:
    if not forbidden:
        return _NEVER_MATCHES
    return re.compile("|".join(re.escape(namespace) for namespace in forbidden))


def compile_rule(rule: Rule, corpus: Corpus) -> CompiledRule:
    forbidden = resolve_forbidden(
        rule.namespace,
        rule.allow,
        corpus,
        permit_self_reference=rule.permit_self_reference,
    )
    return CompiledRule(
        namespace=rule.namespace,
        forbidden=forbidden,
        checker=forbidden_matcher(forbidden),
    )


def compile_rules(rules: Iterable[Rule], corpus: Corpus) -> tuple[CompiledRule, ...]:
    return tuple(compile_rule(rule, corpus) for rule in rules)


def first_applicable(
    rules: Sequence[CompiledRule], namespace: str
) -> CompiledRule | None:
    """The first rule in declaration order whose guard matches ``namespace``."""
    for rule in rules:
        if rule.applies_to(namespace):
            return rule
    return None

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import tomllib

import yaml

from nsrules.exceptions import ConfigError, InvalidPattern
from nsrules.patterns import NamespacePattern, compile_pattern
from nsrules.rules import Rule

DEFAULT_CONFIG_NAME = "nsrules.toml"
YAML_SUFFIXES = (".yaml", ".yml")


@dataclass(frozen=True)
class Config:
    source_dirs: tuple[str, ...]
    rules: tuple[Rule, ...]
    warnings: tuple[str, ...] = ()


class _RuleProblem(Exception):
    def __init__(self, ns_pattern: str, detail: str):
        super().__init__(f"the rule '{ns_pattern}' is invalid, {detail}")


def _yaml_loader():
    class Loader(yaml.SafeLoader):
        pass

    # Treat "on"/"off"/"yes"/"no" as strings, not booleans (YAML 1.1 quirk).
    for key, values in list(Loader.yaml_implicit_resolvers.items()):
        Loader.yaml_implicit_resolvers[key] = [
            (tag, regexp) for tag, regexp in values if tag != "tag:yaml.org,2002:bool"
        ]
    return Loader


def _load_document(path: Path) -> object:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        raise ConfigError(path, f"the file could not be read ({exc})") from exc
    if path.suffix in YAML_SUFFIXES:
        try:
            return yaml.load(raw, Loader=_yaml_loader())
        except yaml.YAMLError as exc:
            raise ConfigError(path, "the file does not contain valid YAML") from exc
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(path, "the file does not contain valid TOML") from exc


def _source_dirs(value: object, path: Path) -> tuple[str, ...]:
    if not isinstance(value, list) or any(not isinstance(item, str) for item in value):
        raise ConfigError(path, "'src-dirs' must be a list of strings")
    if not value:
        raise ConfigError(path, "'src-dirs' must contain at least 1 directory")
    return tuple(value)


def _allowed_pattern(ns_pattern: str, allowed: object) -> NamespacePattern:
    if not isinstance(allowed, str):
        raise _RuleProblem(ns_pattern, "'restrict-to' must be a list of strings")
    try:
        return compile_pattern(allowed)
    except InvalidPattern as exc:
        raise _RuleProblem(
            ns_pattern,
            f"the allowed namespace '{allowed}' is invalid, {exc.detail}",
        ) from exc


def _parse_rule(ns_pattern: str, body: Mapping[str, object]) -> Rule | None:
    """Build the rule for ``ns_pattern``, or None when it would have no effect."""
    try:
        guard = compile_pattern(ns_pattern)
    except InvalidPattern as exc:
        raise _RuleProblem(ns_pattern, exc.detail) from exc

    allow_self = body.get("allow-self", True)
    if not isinstance(allow_self, bool):
        raise _RuleProblem(ns_pattern, "'allow-self' must be a boolean")

    restrict_to = body.get("restrict-to")
    if restrict_to is None:
        return None
    if not isinstance(restrict_to, list):
        raise _RuleProblem(ns_pattern, "'restrict-to' must be a list of strings")
    allow = tuple(_allowed_pattern(ns_pattern, allowed) for allowed in restrict_to)
    if not allow:
        return None
    return Rule(namespace=guard, allow=allow, permit_self_reference=allow_self)


def _rules(value: object, path: Path) -> tuple[tuple[Rule, ...], tuple[str, ...]]:
    if not isinstance(value, list):
        raise ConfigError(path, "'rules' must be a list of tables")
    rules: list[Rule] = []
    warnings: list[str] = []
    for position, body in enumerate(value):
        if not isinstance(body, Mapping):
            raise ConfigError(path, "'rules' must be a list of tables")
        ns_pattern = body.get("namespace")
        if not isinstance(ns_pattern, str):
            raise ConfigError(
                path,
                f"the namespace pattern for rule {position} is invalid, "
                "namespace patterns must be strings",
            )
        try:
            rule = _parse_rule(ns_pattern, body)
        except _RuleProblem as exc:
            raise ConfigError(path, str(exc)) from exc
        if rule is None:
            warnings.append(f"the rule for '{ns_pattern}' has no effect")
        else:
            rules.append(rule)
    return tuple(rules), tuple(warnings)


def parse_config(document: object, path: Path) -> Config:
    if not isinstance(document, Mapping):
        raise ConfigError(path, "the top level form must be a map")
    if "src-dirs" not in document:
        raise ConfigError(path, "the required key 'src-dirs' is missing")
    source_dirs = _source_dirs(document["src-dirs"], path)
    if "rules" not in document:
        raise ConfigError(path, "the required key 'rules' is missing")
    rules, warnings = _rules(document["rules"], path)
    return Config(source_dirs=source_dirs, rules=rules, warnings=warnings)


def default_config_path(root: Path | None = None) -> Path:
    base = root if root is not None else Path.cwd()
    return base / DEFAULT_CONFIG_NAME


def load_config(root: Path | None = None, config_path: Path | None = None) -> Config:
    if config_path is None:
        config_path = default_config_path(root)
    return parse_config(_load_document(config_path), config_path)

"""Source discovery: turning source directories into a closed corpus."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator, Sequence

if TYPE_CHECKING:
    from nsrules.report import Report

CLOJURE_EXTENSIONS: tuple[str, ...] = (".clj", ".cljs", ".cljc")


@dataclass(frozen=True)
class SourceUnit:
    namespace: str
    path: Path


@dataclass(frozen=True)
class Corpus:
    """Every source unit discovered for one run.

    Rule compilation resolves forbidden namespaces against this snapshot, so it
    is built once, after discovery has finished, and never extended.
    """

    units: tuple[SourceUnit, ...] = ()

    @classmethod
    def of(cls, units: Iterable[SourceUnit]) -> "Corpus":
        return cls(units=tuple(units))

    def __iter__(self) -> Iterator[SourceUnit]:
        return iter(self.units)

    def __len__(self) -> int:
        return len(self.units)

    def namespaces(self) -> tuple[str, ...]:
        return tuple(unit.namespace for unit in self.units)


def namespace_for(relative: Path) -> str:
    """``com/my_org/core.clj`` -> ``com.my-org.core``."""
    stem = relative.as_posix().rsplit(".", 1)[0]
    return stem.replace("/", ".").replace("_", "-")


def _iter_files(source_dir: Path, report: Report) -> Iterator[Path]:
    def _on_error(error: OSError) -> None:
        report.unit_skipped(str(error))

    for root, dirnames, filenames in os.walk(source_dir, topdown=True, onerror=_on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            yield Path(root) / filename


def find_source_files(
    source_dirs: Sequence[str | Path],
    report: Report,
    *,
    root: Path | None = None,
) -> Corpus:
    base = root if root is not None else Path.cwd()
    units: list[SourceUnit] = []
    for source_dir in source_dirs:
        directory = base / source_dir
        if not directory.is_dir():
            report.unit_skipped(f"source directory {directory} does not exist, skipping")
            continue
        for path in _iter_files(directory, report):
            if path.suffix not in CLOJURE_EXTENSIONS:
                report.unit_skipped(f"{path} is not a Clojure source file, skipping")
                continue
            namespace = namespace_for(path.relative_to(directory))
            units.append(SourceUnit(namespace=namespace, path=path))
    report.candidate_units(len(units))
    return Corpus.of(units)


def read_unit_text(unit: SourceUnit) -> str:
    return unit.path.read_text(encoding="utf-8")

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


import pytest

from nsrules.corpus import Corpus, SourceUnit


@pytest.fixture
def make_corpus():
    def _make(*namespaces: str) -> Corpus:
        return Corpus.of(
            SourceUnit(namespace=namespace, path=Path(f"{namespace}.clj"))
            for namespace in namespaces
        )

    return _make


@pytest.fixture
def write_project(tmp_path: Path):
    """Lay out a config file plus source files under ``tmp_path``."""

    def _write(config: str, files: dict[str, str], *, config_name: str = "nsrules.toml") -> Path:
        (tmp_path / config_name).write_text(
            textwrap.dedent(config).strip() + "\n", encoding="utf-8"
        )
        for relative, text in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        return tmp_path

    return _write

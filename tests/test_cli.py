from __future__ import annotations

import json

from typer.testing import CliRunner

from nsrules import __version__, cli

CONFIG = """
src-dirs = ["src"]

[[rules]]
namespace = "app.api.*"
restrict-to = ["app.api.*"]

[[rules]]
namespace = "app.db.*"
restrict-to = []
"""

FILES = {
    "src/app/api/handler.clj": """
        (ns app.api.handler
          (:require [app.db.core :as db]))
        """,
    "src/app/db/core.clj": """
        (ns app.db.core)
        """,
}


def _json_tail(output: str) -> object:
    """Parse the JSON document that follows any stderr warning lines."""
    lines = output.splitlines()
    start = next(i for i, line in enumerate(lines) if line.startswith(("[", "{")))
    return json.loads("\n".join(lines[start:]))


def _invoke(args: list[str]):
    runner = CliRunner()
    return runner.invoke(cli.app, args)


def test_cli_help_lists_subcommands() -> None:
    result = _invoke(["--help"])
    assert result.exit_code == 0
    assert "check" in result.output
    assert "explain" in result.output


def test_cli_version() -> None:
    result = _invoke(["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_check_reports_violation_and_fails(write_project) -> None:
    root = write_project(CONFIG, FILES)

    result = _invoke(["check", "--root", str(root)])

    assert result.exit_code == 1
    assert "the rule for 'app.db.*' has no effect" in result.output
    assert "'app.api.handler' is not allowed to reference 'app.db.core'" in result.output
    assert "Found 1 rule violation" in result.output
    assert "  2 files checked" in result.output
    assert "  1 namespace matched a rule" in result.output
    assert "\x1b[" not in result.output


def test_check_passes_when_reference_is_allowed(write_project) -> None:
    config = CONFIG.replace('restrict-to = ["app.api.*"]', 'restrict-to = ["app.api.*", "app.db.*"]')
    root = write_project(config, FILES)

    result = _invoke(["check", "--root", str(root)])

    assert result.exit_code == 0
    assert "All checks passed" in result.output


def test_check_json_output(write_project) -> None:
    root = write_project(CONFIG, FILES)

    result = _invoke(["check", "--root", str(root), "--json", "--jobs", "2"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["exit_status"] == 1
    assert [v["reference"] for v in payload["violations"]] == ["app.db.core"]
    assert payload["warnings"] == ["the rule for 'app.db.*' has no effect"]


def test_check_context_lines_option(write_project) -> None:
    files = {
        "src/app/api/handler.clj": "\n".join(
            ["(ns app.api.handler)", *[f";; {n}" for n in range(2, 10)], "(app.db.core/q)", ";; 11", ";; 12"]
        ),
        "src/app/db/core.clj": "(ns app.db.core)\n",
    }
    root = write_project(CONFIG, files)

    result = _invoke(["check", "--root", str(root), "--context-lines", "1"])

    assert result.exit_code == 1
    assert " 9 | ;; 9" in result.output
    assert "11 | ;; 11" in result.output
    assert ";; 8" not in result.output
    assert ";; 12" not in result.output


def test_check_explicit_yaml_config(write_project, tmp_path) -> None:
    root = write_project(
        """
        src-dirs: [src]
        rules:
          - namespace: app.api.*
            restrict-to: [app.api.*, app.db.*]
        """,
        FILES,
        config_name="rules.yaml",
    )

    result = _invoke(["check", "--root", str(root), "--config", str(tmp_path / "rules.yaml")])

    assert result.exit_code == 0


def test_check_config_error_exits_2(write_project) -> None:
    root = write_project('src-dirs = []\nrules = []', FILES)

    result = _invoke(["check", "--root", str(root)])

    assert result.exit_code == 2
    assert "'src-dirs' must contain at least 1 directory" in result.output
    assert "the configuration file is at" in result.output


def test_explain_lists_forbidden_namespaces(write_project) -> None:
    root = write_project(CONFIG, FILES)

    result = _invoke(["explain", "--root", str(root)])

    assert result.exit_code == 0
    assert "app.api.* may not reference:\n  - app.db.core\n" in result.output


def test_explain_json(write_project) -> None:
    root = write_project(CONFIG, FILES)

    result = _invoke(["explain", "--root", str(root), "--json"])

    assert result.exit_code == 0
    assert _json_tail(result.stdout) == [{"namespace": "app.api.*", "forbidden": ["app.db.core"]}]


def test_explain_json_still_reports_warnings(write_project) -> None:
    files = {**FILES, "src/app/README.md": "notes\n"}
    root = write_project(CONFIG, files)

    result = _invoke(["explain", "--root", str(root), "--json"])

    assert result.exit_code == 0
    assert "warning: the rule for 'app.db.*' has no effect" in result.output
    assert "README.md is not a Clojure source file, skipping" in result.output
    assert _json_tail(result.stdout) == [{"namespace": "app.api.*", "forbidden": ["app.db.core"]}]

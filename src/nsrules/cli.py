from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from nsrules import __version__
from nsrules.config import Config, default_config_path, load_config
from nsrules.corpus import Corpus, find_source_files
from nsrules.exceptions import ConfigError
from nsrules.orchestrator import apply_rules
from nsrules.rendering import (
    compiled_rules_json,
    render_compiled_rules,
    render_json,
    render_text,
)
from nsrules.report import Report
from nsrules.rules import compile_rules

app = typer.Typer(add_completion=False)

_CONFIG_ERROR_EXIT = 2


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"nsrules {__version__}")
        raise typer.Exit(code=0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Applies namespace referencing rules to Clojure source code."""


def _load(config: Optional[Path], root: Path) -> Config:
    config_path = config if config is not None else default_config_path(root)
    try:
        return load_config(root=root, config_path=config_path)
    except ConfigError as exc:
        typer.echo(f"nsrules: {exc}", err=True)
        typer.echo(f"  help: {exc.help}", err=True)
        raise typer.Exit(code=_CONFIG_ERROR_EXIT) from exc


def _discover(loaded: Config, root: Path, report: Report) -> Corpus:
    for warning in loaded.warnings:
        report.warn(warning)
    return find_source_files(loaded.source_dirs, report, root=root)


@app.command("check")
def check(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="The path to the configuration file."
    ),
    root: Path = typer.Option(
        Path("."), "--root", help="Directory that source directories are relative to."
    ),
    context_lines: int = typer.Option(
        4,
        "--context-lines",
        "-n",
        min=0,
        help="The number of lines of context to print around each violation.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    jobs: int = typer.Option(1, "--jobs", "-j", min=1, help="Files to scan in parallel."),
    color: Optional[bool] = typer.Option(
        None, "--color/--no-color", help="Force or disable colored output."
    ),
) -> None:
    """Check every guarded namespace against its rule."""
    loaded = _load(config, root)
    report = Report()
    corpus = _discover(loaded, root, report)
    compiled = compile_rules(loaded.rules, corpus)
    apply_rules(compiled, corpus, report, context_breaks=context_lines + 1, jobs=jobs)
    if json_output:
        typer.echo(render_json(report))
    else:
        typer.echo(render_text(report, color=True), nl=False, color=color)
    raise typer.Exit(code=report.exit_status())


@app.command("explain")
def explain(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="The path to the configuration file."
    ),
    root: Path = typer.Option(
        Path("."), "--root", help="Directory that source directories are relative to."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the rules as JSON."),
) -> None:
    """Show the namespaces each rule forbids in the discovered corpus."""
    loaded = _load(config, root)
    report = Report()
    corpus = _discover(loaded, root, report)
    compiled = compile_rules(loaded.rules, corpus)
    for warning in report.warnings:
        typer.echo(f"warning: {warning}", err=True)
    if json_output:
        typer.echo(compiled_rules_json(compiled))
        return
    typer.echo(render_compiled_rules(compiled), nl=False)

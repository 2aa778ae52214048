"""Typer-based CLI for SCSS variable dependency analysis."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .analyzer import VariableAnalyzer
from .comparator import comparison_recommendations, rate_variable_change
from .config import CONFIG_FILE
from .config_manager import AnalysisSettings, load_settings, set_setting
from .errors import CircularDependencyError, ScssGraphError
from .graph import build_dependency_graph, dependents, find_cycles
from .imports import FileSystemImportResolver
from .models import PropertyContext, VariableResolutionContext

app = typer.Typer(
    help="🎨 scssgraph: SCSS variable dependency resolution & impact analysis.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
config_app = typer.Typer(help="Show or change analysis settings.", no_args_is_help=True)
app.add_typer(config_app, name="config")

console = Console()

_RISK_STYLES = {"low": "green", "medium": "yellow", "high": "red"}


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"scssgraph v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output to stderr."),
):
    """scssgraph: find out what a SCSS variable change really touches."""
    settings = load_settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _build_analyzer(stylesheet: Path, load_paths: Optional[List[Path]]) -> VariableAnalyzer:
    settings = load_settings()
    roots = [stylesheet.parent, *(load_paths or []), *(Path(p) for p in settings.load_paths)]
    return VariableAnalyzer(import_resolver=FileSystemImportResolver(roots), settings=settings)


def _load(analyzer: VariableAnalyzer, stylesheet: Path) -> VariableResolutionContext:
    try:
        return analyzer.analyze_file(stylesheet, track_usage=True)
    except (ScssGraphError, UnicodeDecodeError) as exc:
        _fail(exc)


def _fail(exc: Exception):
    typer.echo(f"❌ {exc}", err=True)
    raise typer.Exit(code=1)


def _risk(level: str) -> str:
    return f"[{_RISK_STYLES.get(level, 'white')}]{level}[/]"


StylesheetArg = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="SCSS file to analyze.")
LoadPathOption = typer.Option(
    None,
    "--load-path",
    "-I",
    help="Extra directory searched for imports (repeatable).",
)


@app.command("analyze")
def analyze(
    stylesheet: Path = StylesheetArg,
    load_path: Optional[List[Path]] = LoadPathOption,
):
    """List every variable with its value, scope and dependencies."""
    analyzer = _build_analyzer(stylesheet, load_path)
    try:
        context = analyzer.analyze_file(stylesheet, track_usage=True)
    except CircularDependencyError as exc:
        # report every loop, not just the first one
        for cycle in _all_cycles(analyzer, stylesheet):
            typer.echo(f"  cycle: {' -> '.join(cycle)}", err=True)
        _fail(exc)
    except (ScssGraphError, UnicodeDecodeError) as exc:
        _fail(exc)

    table = Table(title=f"Variables in {escape(str(stylesheet))}", show_header=True)
    table.add_column("Variable", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_column("Scope")
    table.add_column("Depends on")
    table.add_column("Uses", justify="right")
    table.add_column("Line", justify="right")

    for name, definition in context.variables.items():
        flags = "".join(
            f" !{flag}" for flag, on in (("default", definition.is_default), ("global", definition.is_global)) if on
        )
        table.add_row(
            f"${name}",
            escape(definition.value + flags),
            definition.scope,
            ", ".join(context.dependencies.get(name, [])) or "-",
            str(len(definition.usage)),
            str(definition.line_number),
        )
    console.print(table)
    console.print(f"{context.num_variables} variable(s), {len(context.imports)} import(s)")

    if context.errors:
        console.print("\n[bold yellow]⚠️  Skipped declarations[/bold yellow]")
        for error in context.errors:
            console.print(f"  • {escape(error)}")


def _all_cycles(analyzer: VariableAnalyzer, stylesheet: Path) -> List[List[str]]:
    content = stylesheet.read_text(encoding="utf-8")
    variables, _ = analyzer.extractor.extract(content, str(stylesheet))
    return find_cycles(build_dependency_graph(variables))


@app.command("resolve")
def resolve(
    stylesheet: Path = StylesheetArg,
    name: str = typer.Argument(..., help="Variable name, with or without '$'."),
    selector: str = typer.Option("", "--selector", "-s", help="Selector the value is used in."),
    prop: str = typer.Option("", "--property", "-p", help="Property the value is used for."),
    load_path: Optional[List[Path]] = LoadPathOption,
):
    """Resolve a variable to its literal value."""
    name = name.lstrip("$")
    analyzer = _build_analyzer(stylesheet, load_path)
    context = _load(analyzer, stylesheet)
    property_context = PropertyContext(
        selector=selector,
        property=prop,
        value="",
        line_number=0,
        file_path=str(stylesheet),
    )
    try:
        resolved = analyzer.resolve_variable_with_context(context, name, property_context)
    except ScssGraphError as exc:
        _fail(exc)

    typer.echo(f"${name} = {resolved.value}")
    typer.echo(f"Defined at: {resolved.definition.file_path}:{resolved.definition.line_number}")
    typer.echo(f"Chain: {' -> '.join(resolved.dependency_chain)}")


@app.command("impact")
def impact(
    stylesheet: Path = StylesheetArg,
    name: str = typer.Argument(..., help="Variable name, with or without '$'."),
    new_value: str = typer.Argument(..., help="Hypothetical new value."),
    load_path: Optional[List[Path]] = LoadPathOption,
):
    """Analyze what changing a variable's value would affect."""
    name = name.lstrip("$")
    analyzer = _build_analyzer(stylesheet, load_path)
    context = _load(analyzer, stylesheet)
    try:
        analysis = analyzer.analyze_variable_impact(context, name, new_value)
    except ScssGraphError as exc:
        _fail(exc)

    indirect = dependents(context.dependencies, name)
    console.print(
        Panel.fit(
            f"[bold]${escape(name)}[/bold]: {escape(analysis.current_value)} → {escape(analysis.new_value)}\n"
            f"Risk: {_risk(analysis.risk_level)}    Scope: {analysis.impact_scope}    "
            f"Total impact: {analysis.total_impact}",
            title="Impact",
        )
    )
    console.print(f"Depends on: {', '.join(analysis.direct_dependents) or '-'}")
    console.print(f"Cascading variables: {', '.join(analysis.cascading_variables) or '-'}")
    if len(indirect) > len(analysis.cascading_variables):
        console.print(f"All dependents (transitive): {', '.join(indirect)}")

    if analysis.affected_properties:
        table = Table(title="Affected properties", show_header=True)
        table.add_column("Selector", style="cyan")
        table.add_column("Property")
        table.add_column("Media")
        table.add_column("Location")
        for ctx in analysis.affected_properties:
            table.add_row(
                escape(ctx.selector),
                ctx.property,
                escape(ctx.media_query or "-"),
                f"{escape(ctx.file_path)}:{ctx.line_number}",
            )
        console.print(table)

    if analysis.recommendations:
        console.print("\n[bold]Recommendations[/bold]")
        for recommendation in analysis.recommendations:
            console.print(f"  • {escape(recommendation)}")


@app.command("compare")
def compare(
    before: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Stylesheet before the change."),
    after: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Stylesheet after the change."),
    load_path: Optional[List[Path]] = LoadPathOption,
):
    """Compare the variables of two versions of a stylesheet."""
    before_ctx = _load(_build_analyzer(before, load_path), before)
    after_ctx = _load(_build_analyzer(after, load_path), after)
    comparison = VariableAnalyzer().compare_variable_contexts(before_ctx, after_ctx)

    if not comparison.has_changes:
        console.print("[green]✓[/green] No variable changes.")
        return

    table = Table(title="Variable changes", show_header=True)
    table.add_column("Change")
    table.add_column("Variable", style="cyan", no_wrap=True)
    table.add_column("Before")
    table.add_column("After")
    table.add_column("Risk")

    for definition in comparison.added:
        table.add_row("added", f"${definition.name}", "-", escape(definition.value), _risk(rate_variable_change(definition)))
    for definition in comparison.removed:
        table.add_row("removed", f"${definition.name}", escape(definition.value), "-", _risk(rate_variable_change(definition)))
    for modified in comparison.modified:
        table.add_row(
            "modified",
            f"${modified.variable}",
            escape(modified.before.value),
            escape(modified.after.value),
            _risk(rate_variable_change(modified.after)),
        )
    console.print(table)

    for change in comparison.scope_changes:
        console.print(f"Scope of ${change.variable}: {change.before_scope} → {change.after_scope}")

    recommendations = comparison_recommendations(comparison)
    if recommendations:
        console.print("\n[bold]Recommendations[/bold]")
        for recommendation in recommendations:
            console.print(f"  • {escape(recommendation)}")


@config_app.command("show")
def config_show():
    """Print the effective analysis settings."""
    settings = load_settings()
    table = Table(title=f"Settings ({escape(str(CONFIG_FILE))})", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings.to_dict().items():
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        table.add_row(key, escape(str(value)))
    console.print(table)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name, e.g. risk_low_max."),
    value: str = typer.Argument(..., help="New value; lists are comma-separated."),
):
    """Change one analysis setting and save it."""
    if key not in AnalysisSettings.__dataclass_fields__:
        raise typer.BadParameter(f"Unknown setting '{key}'")
    try:
        settings = set_setting(key, value)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid value for {key}: {exc}")
    typer.echo(f"✓ {key} = {getattr(settings, key)}")


if __name__ == "__main__":
    app()

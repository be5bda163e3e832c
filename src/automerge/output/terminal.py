"""Rich terminal reporter — decision, gates, and merge steps."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from automerge.config.schema import RuleConfig
from automerge.service import ProcessResult

_VERDICT_STYLE = {
    "merged": "bold white on green",
    "eligible": "bold black on bright_cyan",
    "blocked": "bold white on red",
    "failed": "bold white on dark_orange",
    "cancelled": "bold black on yellow",
}


def verdict(result: ProcessResult) -> str:
    if result.cancelled:
        return "cancelled"
    if result.outcome is not None:
        return "merged" if result.outcome.success else "failed"
    if result.evaluation.should_merge and result.gates is not None and result.gates.passed:
        return "eligible"
    return "blocked"


def _pill(label: str) -> Text:
    return Text(f" {label.upper()} ", style=_VERDICT_STYLE.get(label, ""))


def render(result: ProcessResult, *, console: Console | None = None) -> None:
    """Print a process result to the terminal using Rich."""
    console = console or Console(stderr=True)
    evaluation = result.evaluation

    console.print()
    line = Text("Decision: ")
    line.append_text(_pill(verdict(result)))
    line.append(f"  {evaluation.reason}")
    console.print(line)
    if evaluation.rule is not None:
        console.print(f"[dim]Rule:[/dim]  {escape(evaluation.rule.name)}")
    if evaluation.risk is not None:
        console.print(
            f"[dim]Risk:[/dim]  {evaluation.risk.risk_score * 100:.1f}%  {escape(evaluation.risk.summary)}"
        )

    if result.gates is not None:
        table = Table(title="Platform Gates", title_style="bold", border_style="dim")
        table.add_column("Gate", style="cyan", min_width=18)
        table.add_column("Result", justify="center", width=8)
        table.add_column("Detail")
        for gate in result.gates.results:
            mark = "[green]✓[/green]" if gate.passed else "[red]✗[/red]"
            table.add_row(gate.gate, mark, escape(gate.reason) or "-")
        console.print(table)

    if result.outcome is not None:
        outcome = result.outcome
        console.print(f"[dim]State:[/dim]    {outcome.state.value}")
        console.print(f"[dim]Steps:[/dim]    {escape(', '.join(outcome.steps)) or '-'}")
        if outcome.error:
            console.print(f"[bold red]Error:[/bold red]    {escape(outcome.error)}")
        for warning in outcome.warnings:
            console.print(f"[yellow]⚠[/yellow]  {escape(warning)}")
    elif result.dry_run and verdict(result) == "eligible":
        console.print("[bold cyan]Dry run — PR would be merged.[/bold cyan]")


def render_config(cfg: RuleConfig, *, console: Console | None = None) -> None:
    """Print the effective rule configuration."""
    console = console or Console(stderr=True)
    source = "built-in defaults" if cfg.is_default else "repository configuration"
    console.print(f"[bold]Effective configuration[/bold] [dim]({source})[/dim]")

    table = Table(show_lines=True, border_style="dim")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Rule", style="cyan")
    table.add_column("Enabled", justify="center")
    table.add_column("Conditions")
    table.add_column("Actions", style="magenta")
    for i, rule in enumerate(cfg.rules, start=1):
        cond = rule.conditions
        parts = []
        if cond.author_patterns is not None:
            parts.append(f"author: {escape(', '.join(cond.author_patterns))}")
        if cond.file_patterns is not None:
            parts.append(f"files: {escape(', '.join(cond.file_patterns))}")
        if cond.block_patterns is not None:
            parts.append(f"block: {escape(', '.join(cond.block_patterns))}")
        if cond.max_risk_score is not None:
            parts.append(f"max risk: {cond.max_risk_score}")
        act = rule.actions
        actions = [
            f"approve={'yes' if act.auto_approve else 'no'}",
            f"merge={'yes' if act.auto_merge else 'no'}",
            f"method={act.merge_method}",
            f"delete={'yes' if act.delete_branch else 'no'}",
        ]
        table.add_row(
            str(i),
            escape(rule.name),
            "[green]✓[/green]" if rule.enabled else "[dim]—[/dim]",
            "\n".join(parts) or "[dim]any[/dim]",
            "\n".join(actions),
        )
    console.print(table)

    s = cfg.settings
    console.print(f"[dim]aiAnalysis:[/dim]          {s.ai_analysis}")
    console.print(f"[dim]riskThreshold:[/dim]       {s.risk_threshold}")
    console.print(f"[dim]autoDeleteBranches:[/dim]  {s.auto_delete_branches}")
    console.print(f"[dim]requireStatusChecks:[/dim] {s.require_status_checks}")
    console.print(f"[dim]gateFailureMode:[/dim]     {s.gate_failure_mode}")
    console.print(f"[dim]settleSeconds:[/dim]       {s.settle_seconds}")

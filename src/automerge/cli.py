"""Automerge CLI — Typer application with evaluate, validate, and init commands."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from automerge import __version__

app = typer.Typer(
    name="automerge",
    help="Approve and merge pull requests that your policy says are safe.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)

_REPO_RE = re.compile(r"^[\w.-]+/[\w.-]+$")


def _configure_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=debug, markup=False)],
        force=True,
    )


def _build_platform(repo: str):
    """Create the GitHub adapter, exit 2 without a token."""
    from automerge.hosting.github import GitHubPlatform

    token = os.environ.get("GITHUB_TOKEN", "")
    if not token:
        console.print("[bold red]Error:[/bold red] GITHUB_TOKEN not set")
        raise typer.Exit(code=2)
    return GitHubPlatform(repo, token, base_url=os.environ.get("GITHUB_API_URL") or None)


# ── evaluate ──────────────────────────────────────────────────────────────────


@app.command()
def evaluate(
    repo: str = typer.Option(..., "--repo", "-r", help="Repository as owner/name"),
    pr: int = typer.Option(..., "--pr", "-p", help="Pull request number"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Local rule document instead of the repository's"),
    risk_file: Optional[str] = typer.Option(None, "--risk-file", help="JSON risk assessment from an external scorer"),
    format: str = typer.Option("terminal", "--format", "-f", help="Output format: terminal | json"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Evaluate and check gates without mutating anything"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
) -> None:
    """Evaluate a pull request and merge it if policy and platform gates allow."""
    from automerge.config.loader import load
    from automerge.engine.models import RiskAssessment
    from automerge.exceptions import PlatformError
    from automerge.output import json_report, terminal
    from automerge.service import AutomergeService

    _configure_logging(verbose, debug)

    if format not in ("terminal", "json"):
        console.print(f"[bold red]Invalid format:[/bold red] {format}")
        raise typer.Exit(code=2)
    if not _REPO_RE.match(repo):
        console.print(f"[bold red]Invalid repository:[/bold red] {repo} (expected owner/name)")
        raise typer.Exit(code=2)

    # --- Local overrides ---
    cfg = None
    if config:
        path = Path(config)
        if not path.is_file():
            console.print(f"[bold red]Config error:[/bold red] Config file not found: {config}")
            raise typer.Exit(code=2)
        cfg = load(path)

    risk = None
    if risk_file:
        try:
            data = json.loads(Path(risk_file).read_text(encoding="utf-8"))
            risk = RiskAssessment.from_dict(data)
        except (OSError, ValueError, AttributeError) as exc:
            console.print(f"[bold red]Risk file error:[/bold red] {escape(str(exc))}")
            raise typer.Exit(code=2) from exc

    # --- Fetch the PR ---
    platform = _build_platform(repo)
    try:
        change_set = platform.get_change_set(pr)
    except PlatformError as exc:
        console.print(f"[bold red]Platform error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    if verbose or debug:
        console.print(f"[dim]PR #{pr}: {len(change_set.files)} files by {change_set.author}[/dim]")

    # --- Run ---
    service = AutomergeService(platform)
    result = service.handle(change_set, config=cfg, risk=risk, dry_run=dry_run)

    if format == "json":
        print(json_report.render(result))
    else:
        terminal.render(result, console=console)

    if result.merged or (dry_run and terminal.verdict(result) == "eligible"):
        raise typer.Exit(code=0)
    raise typer.Exit(code=1)


# ── validate ──────────────────────────────────────────────────────────────────


@app.command()
def validate(
    path: Optional[str] = typer.Argument(None, help="Rule document (default: .automerge.yml in cwd)"),
) -> None:
    """Validate a rule document and show the effective configuration."""
    from automerge.config.loader import default_config, find_config_file, read_source, validate_document
    from automerge.exceptions import ConfigError
    from automerge.output import terminal

    config_path = find_config_file(Path.cwd(), path)
    if config_path is None:
        console.print("[dim]No .automerge.yml found — built-in defaults apply.[/dim]")
        terminal.render_config(default_config(), console=console)
        raise typer.Exit(code=0)

    try:
        cfg = validate_document(read_source(config_path))
    except ConfigError as exc:
        console.print(f"[bold red]✗ Invalid configuration:[/bold red] {escape(str(exc))}")
        console.print("[dim]The built-in defaults would be used instead.[/dim]")
        raise typer.Exit(code=1) from exc

    console.print(f"[green]✓[/green] {config_path} is valid")
    terminal.render_config(cfg, console=console)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing .automerge.yml"),
) -> None:
    """Generate a starter .automerge.yml in the current directory."""
    from automerge.config.defaults import CONFIG_FILENAME, STARTER_YAML

    config_path = Path.cwd() / CONFIG_FILENAME
    if config_path.exists() and not force:
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(STARTER_YAML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"automerge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """Automerge — approve and merge pull requests your policy says are safe."""

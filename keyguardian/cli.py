"""
Command Line Interface for KeyGuardian
"""

import asyncio
import json
import logging
import os
import sys
from typing import List, Optional, Tuple

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from . import __version__
from .config import ConfigError, load_config
from .git_hooks import (
    DEFAULT_HOOKS,
    HOOK_COMMANDS,
    GitError,
    get_staged_files,
    install_hooks,
    repository_root,
)
from .guardian import KeyGuardian
from .models import ScanResult
from .report import render_findings, render_summary, result_to_dict, save_results

logger = logging.getLogger(__name__)

# Load environment variables (KEYGUARDIAN_CONFIG) from .env file
load_dotenv()

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False):
    """Setup logging with rich formatting"""
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
        force=True,
    )


def _load_guardian(config_path: Optional[str], root: str) -> KeyGuardian:
    try:
        config = load_config(config_path, root=root)
        return KeyGuardian(config, root=root)
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        sys.exit(2)


def _scans_staged(targets: Tuple[str, ...], scan_all: bool, staged: bool) -> bool:
    return staged or not (scan_all or targets)


def _resolve_root(root: Optional[str], staged_mode: bool) -> str:
    if root:
        return os.path.abspath(root)
    if staged_mode:
        # Staged paths are relative to the repository, not the working directory
        try:
            return repository_root()
        except GitError as e:
            logger.debug(f"No repository root: {e}")
    return os.getcwd()


def _collect_files(
    guardian: KeyGuardian, targets: Tuple[str, ...], scan_all: bool, staged: bool
) -> List[str]:
    if not _scans_staged(targets, scan_all, staged):
        if scan_all:
            return guardian.walker.collect(guardian.root)
        return guardian.walker.collect_targets(targets)

    try:
        staged_files = get_staged_files(guardian.root)
    except GitError as e:
        err_console.print(
            "[yellow]Warning: Could not get staged files, scanning current directory "
            f"({escape(str(e))})[/yellow]"
        )
        return guardian.walker.collect(guardian.root)
    return guardian.walker.filter_known(staged_files)


def _scan_with_progress(guardian: KeyGuardian, files: List[str]) -> ScanResult:
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=err_console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning...", total=len(files))

        def advance(index: int, total: int, path: str):
            relative = os.path.relpath(path, guardian.root)
            if len(relative) > 60:
                relative = "..." + relative[-57:]
            progress.update(task, completed=index, description=f"Scanning {relative}")

        return guardian.scan_paths(files, progress=advance)


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx):
    """
    KeyGuardian - keep API keys and secrets out of your commits

    \b
    Examples:

      # Scan the files staged for commit (what the pre-commit hook runs)
      keyguardian scan

      # Scan the entire project
      keyguardian scan --all

      # Scan specific files or directories
      keyguardian scan src/config.js settings/

      # Install git pre-commit and pre-push hooks
      keyguardian install-hooks
    """
    ctx.ensure_object(dict)


@cli.command()
@click.argument("targets", nargs=-1, type=click.Path())
@click.option("--all", "scan_all", is_flag=True, help="Scan the entire project.")
@click.option(
    "--staged",
    is_flag=True,
    help="Scan only files staged for commit (the default when no targets are given).",
)
@click.option(
    "--concurrent", is_flag=True, help="Scan files on a worker pool instead of one at a time."
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (default: .keyguardian.json/.yml or .apiguardian.json).",
)
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False),
    help="Project root for ignore rules and reported paths (default: current directory).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format for findings.",
)
@click.option("--output", "-o", type=click.Path(), help="Also save results to a JSON file.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def scan(
    targets: Tuple[str, ...],
    scan_all: bool,
    staged: bool,
    concurrent: bool,
    config_path: Optional[str],
    root: Optional[str],
    output_format: str,
    output: Optional[str],
    verbose: bool,
):
    """
    Scan files for API keys and secrets.

    Exits with status 1 when secrets are found, so it can block commits.

    TARGETS: Files or directories to scan (optional)
    """
    setup_logging(verbose)

    staged_mode = _scans_staged(targets, scan_all, staged)
    guardian = _load_guardian(config_path, _resolve_root(root, staged_mode))
    files = _collect_files(guardian, targets, scan_all, staged)

    if concurrent:
        result = asyncio.run(guardian.scan_paths_concurrently(files))
    elif output_format == "text":
        result = _scan_with_progress(guardian, files)
    else:
        result = guardian.scan_paths(files)

    if output_format == "json":
        click.echo(json.dumps(result_to_dict(result), indent=2))
    else:
        render_findings(result, console)
        if verbose:
            render_summary(result, console)

    if output:
        save_results(result, output)
        err_console.print(f"[green]Results saved to {output}[/green]")

    if result.has_findings:
        sys.exit(1)


@cli.command("install-hooks")
@click.option(
    "--hook",
    "hooks",
    multiple=True,
    type=click.Choice(sorted(HOOK_COMMANDS)),
    help="Hook to install; may be repeated (default: pre-commit and pre-push).",
)
def install_hooks_command(hooks: Tuple[str, ...]):
    """Install git hooks that run KeyGuardian before commits and pushes."""
    try:
        installed = install_hooks(hooks=hooks or DEFAULT_HOOKS)
    except GitError as e:
        err_console.print(f"[red]❌ Failed to install git hooks: {escape(str(e))}[/red]")
        sys.exit(1)

    for hook_path in installed:
        console.print(f"[green]✅ Git {hook_path.name} hook installed successfully![/green]")
    console.print("[cyan]The hooks will now check for API keys before each commit and push.[/cyan]")


@cli.command("show-config")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False))
def show_config(config_path: Optional[str]):
    """Show the current configuration."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        sys.exit(2)

    click.echo(json.dumps(config.model_dump(mode="json", by_alias=True), indent=2))


if __name__ == "__main__":
    cli()

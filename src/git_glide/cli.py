import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import ops
from .config import Config
from .constants import APP_NAME, CONFIG_FILE, LOG_FILE
from .divergence import Divergence
from .errors import GlideError

logger = logging.getLogger(APP_NAME)
console = Console()
err_console = Console(stderr=True)

UNIMPLEMENTED = ("history", "undo", "redo", "rewrite")


def setup_logging(config: Config, debug: bool = False) -> None:
    """Configures the logging subsystem.

    Args:
        config (Config): Supplies the log rotation size.
        debug (bool): If True, DEBUG and INFO messages are also shown on stderr.
    """
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S"
    )

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    try:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=config.limits.max_log_size,
            backupCount=5,
        )
    except OSError as e:
        logger.warning(f"File logging disabled, cannot open {LOG_FILE}: {e}")
        return
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)


def _print_divergence(branch_label: str, divergence: Divergence) -> None:
    if divergence.ahead == 0 and divergence.behind == 0:
        console.print(f"[bold green]✔ {branch_label} already up to date.[/bold green]")
        return
    console.print(
        Panel(
            f"[bold]Pushed:[/bold] {divergence.ahead} commit(s)\n"
            f"[bold]Pulled:[/bold] {divergence.behind} commit(s)",
            title=f"Synced {branch_label}",
            border_style="green",
            expand=False,
        )
    )


def show_status(workflow: ops.Workflow) -> None:
    """Displays the current branch, its drift and the pending changes."""
    report = workflow.status()

    console.print(f"On branch [bold cyan]{report.branch}[/bold cyan]")
    if report.divergence is None:
        console.print(f"[dim]No tracking information for {workflow.remote}.[/dim]")
    else:
        console.print(
            f"{report.divergence.ahead} ahead, {report.divergence.behind} behind "
            f"{workflow.remote}/{report.branch} [dim](as of last fetch)[/dim]"
        )

    if not report.changes:
        console.print("[green]Working tree clean.[/green]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("State", style="yellow")
    table.add_column("Path")
    for line in report.changes:
        table.add_row(line[:2], line[3:])
    console.print(table)


def show_config_reference() -> None:
    """Displays a formatted table of all available configuration options."""
    table = Table(title="git-glide Configuration Schema", show_lines=True)
    table.add_column("Section", style="cyan", justify="right")
    table.add_column("Key", style="green")
    table.add_column("Type", style="dim")
    table.add_column("Default", style="yellow")
    table.add_column("Description")

    table.add_row(
        "core", "remote_name", "str", '"origin"', "The remote used by sync."
    )
    table.add_row(
        "",
        "stash_prefix",
        "str",
        '"git-glide"',
        "Prefix of the stash labels used to carry changes across switches.",
    )
    table.add_row("git", "executable", "str", '"git"', "The git binary to run.")
    table.add_row(
        "", "debug", "bool", "false", "Echo every git command and its output."
    )
    table.add_row(
        "",
        "check_exit_status",
        "bool",
        "true",
        "Treat a non-zero git exit status as a failure.",
    )
    table.add_row(
        "limits",
        "max_log_size",
        "int | str",
        '"5mb"',
        "Max size for the log file before rotation (e.g., '5mb', '1gb').",
    )

    console.print(table)
    console.print(f"[dim]Global config: {CONFIG_FILE}[/dim]")


def run_command(args: argparse.Namespace, config: Config) -> None:
    """Dispatches a parsed command line.

    Raises:
        GlideError: Whatever the verb raised.
    """
    cwd = Path.cwd()

    if args.command == "clone":
        with console.status(f"Cloning {args.url}...", spinner="dots"):
            path = ops.clone(args.url, cwd, config)
        console.print(f"[bold green]✔ Cloned into {path.name}.[/bold green]")
        return
    elif args.command == "config":
        show_config_reference()
        return

    workflow = ops.Workflow.open(cwd, config)

    if args.command == "sync":
        with console.status("Syncing with remote...", spinner="dots"):
            divergence = workflow.sync()
        _print_divergence(workflow.repo.current_branch(), divergence)
    elif args.command == "status":
        show_status(workflow)
    elif args.command == "stage":
        workflow.stage(args.pattern)
    elif args.command == "unstage":
        workflow.unstage(args.pattern)
    elif args.command == "clear":
        workflow.clear()
        console.print("[bold yellow]Local changes discarded.[/bold yellow]")
    elif args.command == "commit":
        with console.status("Committing and syncing...", spinner="dots"):
            divergence = workflow.commit(args.message)
        _print_divergence(workflow.repo.current_branch(), divergence)
    elif args.command == "switch":
        restored = workflow.switch(args.branch)
        console.print(f"[bold green]✔ Switched to {args.branch}.[/bold green]")
        if restored:
            console.print(f"   Restored your changes from {restored.reference}.")
    elif args.command == "branch":
        workflow.branch(args.name)
        console.print(f"[bold green]✔ Created {args.name}.[/bold green]")
    elif args.command == "rebase":
        with console.status(f"Rebasing onto {args.other}...", spinner="dots"):
            workflow.rebase(args.other)
        console.print(f"[bold green]✔ Rebased onto {args.other}.[/bold green]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME, description="Simplified, safer git workflows."
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Echo every git command and its output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    clone_parser = subparsers.add_parser("clone", help="Clone a repository")
    clone_parser.add_argument("url", help="URL for the repository")

    subparsers.add_parser("sync", help="Synchronize with the remote repository")
    subparsers.add_parser("status", help="Show branch and working tree status")

    stage_parser = subparsers.add_parser("stage", help="Stage changes to commit")
    stage_parser.add_argument("pattern", help="Files to stage")
    unstage_parser = subparsers.add_parser("unstage", help="Unstage staged changes")
    unstage_parser.add_argument("pattern", help="Files to unstage")

    subparsers.add_parser("clear", help="Discard all local changes")

    commit_parser = subparsers.add_parser(
        "commit", help="Commit staged changes and sync"
    )
    commit_parser.add_argument("message", help="Commit message")

    switch_parser = subparsers.add_parser(
        "switch", help="Switch branches, carrying uncommitted changes along"
    )
    switch_parser.add_argument("branch", help="Name of the branch to switch to")

    branch_parser = subparsers.add_parser(
        "branch", help="Create a new branch based on the current one"
    )
    branch_parser.add_argument("name", help="Name for the new branch")

    rebase_parser = subparsers.add_parser(
        "rebase", help="Rebase the current branch onto another, up-to-date branch"
    )
    rebase_parser.add_argument("other", help="Branch to rebase onto")

    subparsers.add_parser("config", help="List the available configuration options")

    for name in UNIMPLEMENTED:
        subparsers.add_parser(name, help="(not implemented)")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the git-glide CLI."""
    args = build_parser().parse_args(argv)

    if args.command in UNIMPLEMENTED:
        err_console.print(f"[bold red]ERROR:[/bold red] '{args.command}' is not implemented.")
        sys.exit(1)

    config = Config.load(Path.cwd())
    if args.debug:
        config.git.debug = True
    setup_logging(config, debug=config.git.debug)

    try:
        run_command(args, config)
    except GlideError as e:
        logger.info(f"{args.command} failed: {e}")
        err_console.print(Text.assemble(("ERROR: ", "bold red"), str(e)))
        sys.exit(1)


if __name__ == "__main__":
    main()

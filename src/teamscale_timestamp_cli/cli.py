from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from teamscale_timestamp_core.config import BranchPrecedence, load_config
from teamscale_timestamp_core.env import EnvReader
from teamscale_timestamp_core.errors import ConfigError, TimestampError
from teamscale_timestamp_ops import resolve_timestamp, write_revision_txt

app = typer.Typer(
    help=(
        "Determine the value for the ?t= parameter when uploading external data to "
        "Teamscale. Run this command from within the working directory of your "
        "version control system checkout."
    ),
    add_completion=False,
)
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


def _fail(error: TimestampError, code: int = 1) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape(str(error))}")
    if error.hint:
        err_console.print(f"[dim]{escape(error.hint)}[/dim]")
    raise typer.Exit(code)


@app.command()
def timestamp(
    branch: Optional[str] = typer.Option(
        None, "--branch", "-b",
        help="Branch name to use for the upload (e.g. master or Main). Use this if automatic detection does not work",
    ),
    tfs_pat: Optional[str] = typer.Option(
        None, "--tfs-pat",
        help="Personal access token for the TFS/Azure DevOps REST API (TFVC only)",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable verbose output. Use this to debug what the tool is doing",
    ),
    path: Path = typer.Option(
        Path("."), "--path", "-C",
        help="Directory inside the checkout (defaults to the current directory)",
    ),
    precedence: Optional[BranchPrecedence] = typer.Option(
        None, "--precedence",
        help="Whether the VCS branch or the build server branch wins when both are known",
    ),
    guess_git_branch: Optional[bool] = typer.Option(
        None, "--guess-git-branch/--no-guess-git-branch",
        help="As a last resort, use the single local Git branch that contains HEAD",
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout",
        help="Timeout in seconds for the TFS/Azure DevOps REST call",
    ),
    revision_txt: Optional[Path] = typer.Option(
        None, "--revision-txt",
        help="Also write the result to this revision.txt file",
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config",
        help="Configuration file (default: .teamscale-timestamp.toml in the checkout)",
    ),
) -> None:
    """
    Print the Teamscale timestamp (<branch>:<epoch millis>) of the current checkout.

    Resolution order for the branch:
    - --branch
    - the branch reported by the VCS (Git symbolic ref, SVN URL)
    - build server environment variables
    """
    _configure_logging(verbose)
    env = EnvReader()

    try:
        config = load_config(
            path,
            config_path=config_path,
            env=env,
            overrides={
                "branch": {"precedence": precedence, "guess_from_git": guess_git_branch},
                "tfvc": {"timeout": timeout},
                "log": {"verbose": True if verbose else None},
            },
        )
    except ConfigError as exc:
        _fail(exc, code=2)
    if config.log.verbose and not verbose:
        _configure_logging(True)

    try:
        result = resolve_timestamp(
            path,
            branch_override=branch,
            tfs_pat=tfs_pat,
            env=env,
            config=config,
        )
    except TimestampError as exc:
        _fail(exc)

    if revision_txt is not None:
        try:
            write_revision_txt(result.output, revision_txt)
        except OSError as exc:
            err_console.print(f"[red]Error:[/red] cannot write {escape(str(revision_txt))}: {escape(str(exc))}")
            raise typer.Exit(1)

    typer.echo(result.output.value)


def main():
    app()

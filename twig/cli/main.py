"""
Command-line interface for Twig.

A thin shell over VersionControl: every command maps to one operation,
prints its outcome, and turns VersionControlError into a one-line message
with exit status 1.
"""

import functools
import sys
from pathlib import Path
from typing import Any, Callable, List

import click

from twig.config import config
from twig.logging import initialize_logging
from twig.version_control import Commit, RepositoryStatus, VersionControl, VersionControlError

DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def handle_errors(func: Callable) -> Callable:
    """Print VersionControlError messages and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except VersionControlError as e:
            click.echo(str(e))
            sys.exit(1)

    return wrapper


def format_commit(commit: Commit) -> str:
    """Render one log entry."""
    lines = ["===", f"commit {commit.commit_id}"]
    if commit.is_merge:
        lines.append(f"Merge: {commit.parent_id[:7]} {commit.second_parent_id[:7]}")
    lines.append(f"Date: {commit.created_at.astimezone().strftime(DATE_FORMAT)}")
    lines.append(commit.message)
    lines.append("")
    return "\n".join(lines)


def format_status(status: RepositoryStatus) -> str:
    """Render the status sections."""

    def section(title: str, entries: List[str]) -> List[str]:
        return [f"=== {title} ===", *entries, ""]

    branches = [
        f"*{name}" if name == status.current_branch else name for name in status.branches
    ]
    lines: List[str] = []
    lines += section("Branches", branches)
    lines += section("Staged Files", status.staged)
    lines += section("Removed Files", status.removed)
    lines += section("Modifications Not Staged For Commit", status.modified)
    lines += section("Untracked Files", status.untracked)
    return "\n".join(lines)


class CheckoutCommand(click.Command):
    """Reads ``checkout [ID] -- FILE`` as ``checkout [ID] --file FILE``."""

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        if "--" in args:
            args = list(args)
            args[args.index("--")] = "--file"
        return super().parse_args(ctx, args)


@click.group()
@click.option(
    "--work-dir",
    "-C",
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
    help="Working directory of the repository",
)
@click.option(
    "--log-level",
    default=config.logging.level,
    type=click.Choice(["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Console log level",
)
@click.pass_context
def cli(ctx: click.Context, work_dir: Path, log_level: str) -> None:
    """Twig: a small single-user version-control system."""
    log_config = config.logging
    initialize_logging(
        log_dir=work_dir / config.repository.repo_dir / log_config.log_dir,
        level=log_level,
        rotation=log_config.rotation,
        retention=log_config.retention,
        format_string=log_config.format,
        enable_file_logging=log_config.enable_file_logging,
        enable_console_logging=log_config.enable_console_logging,
    )
    ctx.obj = VersionControl(work_dir=work_dir, config=config)


@cli.command()
@click.pass_obj
@handle_errors
def init(vc: VersionControl) -> None:
    """Create a new repository in the working directory."""
    vc.init()


@cli.command()
@click.argument("file_name")
@click.pass_obj
@handle_errors
def add(vc: VersionControl, file_name: str) -> None:
    """Stage a file for the next commit."""
    vc.add(file_name)


@cli.command("rm")
@click.argument("file_name")
@click.pass_obj
@handle_errors
def remove(vc: VersionControl, file_name: str) -> None:
    """Untrack a file."""
    vc.remove(file_name)


@cli.command()
@click.argument("message", required=False, default="")
@click.pass_obj
@handle_errors
def commit(vc: VersionControl, message: str) -> None:
    """Commit the staged changes."""
    vc.commit(message)


@cli.command(cls=CheckoutCommand)
@click.argument("target", required=False)
@click.option("--file", "file_name", help="File to restore instead of switching branches")
@click.pass_obj
@handle_errors
def checkout(vc: VersionControl, target: str, file_name: str) -> None:
    """
    Switch branches or restore a file.

    \b
    checkout BRANCH
    checkout -- FILE
    checkout COMMIT_ID -- FILE
    """
    if file_name is None:
        if target is None:
            raise click.UsageError("Incorrect operands.")
        vc.checkout_branch(target)
    elif target is None:
        vc.checkout_file(file_name)
    else:
        vc.checkout_commit_file(target, file_name)


@cli.command()
@click.pass_obj
@handle_errors
def log(vc: VersionControl) -> None:
    """Show the current branch's history."""
    for entry in vc.log():
        click.echo(format_commit(entry))


@cli.command("global-log")
@click.pass_obj
@handle_errors
def global_log(vc: VersionControl) -> None:
    """Show every commit ever made."""
    for entry in vc.global_log():
        click.echo(format_commit(entry))


@cli.command()
@click.argument("message")
@click.pass_obj
@handle_errors
def find(vc: VersionControl, message: str) -> None:
    """Print the ids of commits with the given message."""
    commit_ids = vc.find(message)
    if not commit_ids:
        click.echo("Found no commit with that message.")
    for commit_id in commit_ids:
        click.echo(commit_id)


@cli.command()
@click.pass_obj
@handle_errors
def status(vc: VersionControl) -> None:
    """Show branches, staged files and working-tree changes."""
    click.echo(format_status(vc.status()))


@cli.command()
@click.argument("name")
@click.pass_obj
@handle_errors
def branch(vc: VersionControl, name: str) -> None:
    """Create a branch at the current commit."""
    vc.branch(name)


@cli.command("rm-branch")
@click.argument("name")
@click.pass_obj
@handle_errors
def remove_branch(vc: VersionControl, name: str) -> None:
    """Delete a branch."""
    vc.remove_branch(name)


@cli.command()
@click.argument("commit_id")
@click.pass_obj
@handle_errors
def reset(vc: VersionControl, commit_id: str) -> None:
    """Check out a commit and move the current branch to it."""
    vc.reset(commit_id)


@cli.command()
@click.argument("name")
@click.pass_obj
@handle_errors
def merge(vc: VersionControl, name: str) -> None:
    """Merge a branch into the current branch."""
    result = vc.merge(name)
    if result.message:
        click.echo(result.message)


if __name__ == "__main__":
    cli()

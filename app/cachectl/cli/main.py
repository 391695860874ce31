"""Main CLI application entry point.

Defines the Typer application. The tool is a single command driven by
boolean flags; anything it does not recognize is a configuration error
reported before the cache is touched.
"""

from pathlib import Path
from typing import Annotated

import typer

from cachectl import __version__
from cachectl.cli.display import print_summary
from cachectl.core.orchestrator import CacheCleanup
from cachectl.core.paths import get_default_gradle_home
from cachectl.core.settings import SettingsError, load_settings
from cachectl.utils.formatting import console, print_error, print_info
from cachectl.utils.log import configure_logging

app = typer.Typer(
    name="cachectl",
    help="Prune and verify a Gradle cache directory before CI cache upload.",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": []},
)

HELP_ALIASES: tuple[str, ...] = ("-?", "-h", "--help")


def is_help_request(arg: str) -> bool:
    """Check if an argument asks for usage text."""
    return arg in HELP_ALIASES or arg.endswith("-help")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"cachectl version {__version__}")
        raise typer.Exit()


def _reject_extra_args(ctx: typer.Context) -> None:
    """Handle arguments Click did not consume.

    Help options are not registered with Click, so help aliases end up
    here too. The first argument decides: a help alias prints usage and
    exits 0, anything else prints usage and exits 1.
    """
    if not ctx.args:
        return

    arg = ctx.args[0]
    if is_help_request(arg):
        typer.echo(ctx.get_help())
        raise typer.Exit()

    console.print(f"Unrecognized option: {arg}", markup=False, highlight=False)
    typer.echo(ctx.get_help())
    raise typer.Exit(code=1)


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "help_option_names": [],
    }
)
def main(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Print verbose output."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Run as usual, however, avoid file removals."),
    ] = False,
    keep_old_versions: Annotated[
        bool,
        typer.Option(
            "--keep-old-versions",
            help="Keep old Gradle distributions (by default, all are removed except the "
            "version in wrapper).",
        ),
    ] = False,
    keep_lock_files: Annotated[
        bool,
        typer.Option("--keep-lock-files", help="Keep journal-1.lock and modules-2.lock files."),
    ] = False,
    keep_user_id: Annotated[
        bool,
        typer.Option("--keep-user-id", help="Keep user-id.txt and user-id.txt.lock files."),
    ] = False,
    keep_unzipped_distributions: Annotated[
        bool,
        typer.Option(
            "--keep-unzipped-distributions",
            help="Keep transforms-2/.../unzipped-distribution directories.",
        ),
    ] = False,
    verify_checksums: Annotated[
        bool,
        typer.Option(
            "--verify-checksums/--skip-checksums",
            help="Verify checksums for files in caches/modules-2/files-2.1.",
        ),
    ] = True,
    gradle_home: Annotated[
        Path | None,
        typer.Option(
            "--gradle-home",
            help="Gradle user home to clean (default: $GRADLE_USER_HOME or ~/.gradle).",
            file_okay=False,
        ),
    ] = None,
    project_dir: Annotated[
        Path | None,
        typer.Option(
            "--project-dir",
            help="Project holding gradle/wrapper/gradle-wrapper.properties (default: cwd).",
            file_okay=False,
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Settings file (default: ~/.config/cachectl/config.toml)."),
    ] = None,
    verify_timeout: Annotated[
        int | None,
        typer.Option("--verify-timeout", help="Seconds to wait for checksum verification."),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", help="Checksum verification threads (default: CPU count)."),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Gradle cache cleanup utility.

    Removes lock files, user id files, unzipped distributions, stale wrapper
    distributions and caches of other Gradle versions, then verifies module
    artifacts against their checksum directory names.
    """
    _reject_extra_args(ctx)

    try:
        config = load_settings(config_path).with_flags(
            dry_run=dry_run,
            keep_old_versions=keep_old_versions,
            keep_lock_files=keep_lock_files,
            keep_user_id=keep_user_id,
            keep_unzipped_distributions=keep_unzipped_distributions,
            verbose=verbose,
            verify_checksums=verify_checksums,
            verify_timeout_seconds=verify_timeout,
            workers=workers,
        )
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    configure_logging(config.verbose)
    print_info("Gradle cache cleanup utility")

    cleanup = CacheCleanup(
        config,
        gradle_home or get_default_gradle_home(),
        project_dir or Path.cwd(),
    )
    print_summary(cleanup.run(), verbose=config.verbose)


if __name__ == "__main__":
    app()

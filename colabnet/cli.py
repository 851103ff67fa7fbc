"""
Command-line interface for colabnet.

Provides commands for rebuilding a repository's collaboration snapshot
and querying file owners and cousins.
"""

import sys
from pathlib import Path

import click

from colabnet import __version__
from colabnet.utils.logging_config import setup_logging
from colabnet.utils.validation import validate_path

PASSTHROUGH = {"ignore_unknown_options": True}


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Path to log file"
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a JSON configuration file"
)
@click.option(
    "--repo", "-C",
    type=click.Path(file_okay=False),
    help="Run as if started in this directory"
)
@click.pass_context
def cli(ctx, verbose, log_file, config_path, repo):
    """
    colabnet

    Map who changes which files, and which files change together,
    from git history.
    """
    from colabnet.core.config import Config

    ctx.ensure_object(dict)

    if config_path:
        Config.load_from_file(config_path)
    config = Config.load_from_env()
    if verbose:
        config.verbose = True

    log_level = "DEBUG" if config.verbose else config.log_level
    try:
        setup_logging(
            level=log_level,
            log_file=Path(log_file) if log_file else None,
            brief=not config.verbose,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if repo:
        is_valid, error = validate_path(repo)
        if not is_valid:
            click.echo(f"Error: {error}", err=True)
            sys.exit(1)

    ctx.obj["verbose"] = config.verbose
    ctx.obj["config"] = config
    ctx.obj["start_dir"] = Path(repo) if repo else None


def _engine(ctx):
    from colabnet.engine import ColabNetEngine

    return ColabNetEngine(ctx.obj["config"], start_dir=ctx.obj["start_dir"])


def _fail(ctx, error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get("verbose"):
        import traceback
        traceback.print_exc()
    sys.exit(1)


def _emit(ctx, report, format: str) -> None:
    from colabnet.reporting.formatter import format_report

    if report.is_empty:
        return

    format = format or ctx.obj["config"].report.default_format
    click.echo(format_report(report, format, config=ctx.obj["config"].report))


@cli.command(context_settings=PASSTHROUGH)
@click.argument("log_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def scan(ctx, log_args):
    """
    Rebuild the collaboration snapshot.

    LOG_ARGS are passed to `git log` (for example a revision range or
    --since=2.years).

    Examples:

        colabnet scan

        colabnet scan --since=1.year main
    """
    try:
        state = _engine(ctx).scan(list(log_args))
    except Exception as e:
        _fail(ctx, e)
        return

    storage = state.data["storage"]
    stats = storage["graphs"].get_statistics()
    click.echo(
        f"Snapshot written to {storage['path']}: "
        f"{stats['files']} files, {stats['authors']} authors",
        err=True,
    )
    if ctx.obj["verbose"]:
        for stage_name, elapsed in state.timings():
            click.echo(f"  {stage_name:<12} {elapsed:.3f}s", err=True)


@cli.command(context_settings=PASSTHROUGH)
@click.option(
    "--mode", "-m",
    type=click.Choice(["files", "authors"]),
    default="files",
    help="files: author -> file ownership; authors: authors sharing files"
)
@click.argument("log_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def graph(ctx, mode, log_args):
    """
    Rebuild the snapshot and print a Graphviz DOT graph.

    Examples:

        colabnet graph | dot -Tsvg > owners.svg

        colabnet graph --mode authors --since=6.months
    """
    try:
        dot = _engine(ctx).graph(mode, list(log_args))
    except Exception as e:
        _fail(ctx, e)
        return

    click.echo(dot)


@cli.command()
@click.argument("path")
@click.option(
    "--format", "-f",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format"
)
@click.pass_context
def owners(ctx, path, format):
    """
    Show the authors of PATH, most changes first.

    Examples:

        colabnet owners src/main.rs
    """
    try:
        report = _engine(ctx).owners(path)
    except Exception as e:
        _fail(ctx, e)
        return

    _emit(ctx, report, format)


@cli.command()
@click.argument("path")
@click.option(
    "--format", "-f",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format"
)
@click.pass_context
def cousins(ctx, path, format):
    """
    Show the files that most often change together with PATH.

    Examples:

        colabnet cousins src/main.rs
    """
    try:
        report = _engine(ctx).cousins(path)
    except Exception as e:
        _fail(ctx, e)
        return

    _emit(ctx, report, format)


@cli.command()
@click.argument("author")
@click.option(
    "--format", "-f",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format"
)
@click.pass_context
def files(ctx, author, format):
    """
    Show the files AUTHOR changed, most changes first.

    AUTHOR must match the log exactly, e.g. "Jane Doe <jane@example.com>".
    """
    try:
        report = _engine(ctx).files_of(author)
    except Exception as e:
        _fail(ctx, e)
        return

    _emit(ctx, report, format)


@cli.command()
@click.pass_context
def snapshot_stats(ctx):
    """Show snapshot statistics."""
    try:
        engine = _engine(ctx)
        stats = engine.store.get_storage_stats(engine.repo_root)
        db_stats = engine.load().get_statistics() if stats["exists"] else {}
    except Exception as e:
        _fail(ctx, e)
        return

    click.echo("Snapshot Statistics:")
    click.echo("-" * 40)
    click.echo(f"  Path: {stats['snapshot_path']}")
    click.echo(f"  Size: {stats['total_size_kb']:.2f} KB")
    for key, value in db_stats.items():
        click.echo(f"  {key.replace('_', ' ').capitalize()}: {value}")


@cli.command()
@click.option(
    "--output", "-o",
    type=click.Path(),
    default="colabnet.json",
    help="Output path for configuration file"
)
def init(output):
    """
    Initialize configuration file.

    Creates a configuration file from the current settings that can be
    customized and passed back with --config.
    """
    from colabnet.core.config import Config

    Config.save_to_file(output)
    click.echo(f"Configuration saved to: {output}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()

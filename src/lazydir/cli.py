"""CLI entrypoint for lazydir."""

from __future__ import annotations

import json

import click
from pydantic import ValidationError

from lazydir.config.store import SettingsStore
from lazydir.errors import FileError
from lazydir.paths import settings_path
from lazydir.runtime_logging import configure_runtime_logging
from lazydir.version import __version__
from lazydir.walker import Walker


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def main() -> None:
    """lazydir: lazily enumerate every file under a directory."""


@main.command("walk")
@click.argument("root", required=False, default=".")
@click.option("--fanout/--sequential", "multithreaded", default=None, help="Production strategy")
@click.option("--workers", "max_workers", type=click.IntRange(min=1), help="Fan-out pool size")
@click.option("--follow-symlinks/--no-follow-symlinks", default=None)
@click.option("--limit", type=click.IntRange(min=1), help="Stop after this many paths")
@click.option("--log-level", type=click.Choice(["off", "error", "warning", "info", "debug"]))
def walk_command(
    root: str,
    multithreaded: bool | None,
    max_workers: int | None,
    follow_symlinks: bool | None,
    limit: int | None,
    log_level: str | None,
) -> None:
    """Print every file below ROOT, one absolute path per line."""
    settings = SettingsStore().load()
    configure_runtime_logging(
        level=log_level or settings.logging.level,
        log_file=settings.logging.file,
    )

    walk_settings = settings.walk.model_copy(
        update={
            key: value
            for key, value in {
                "multithreaded": multithreaded,
                "max_workers": max_workers,
                "follow_symlinks": follow_symlinks,
            }.items()
            if value is not None
        }
    )

    try:
        walker = Walker.from_settings(root, walk_settings)
    except FileError as exc:
        raise click.ClickException(str(exc))

    failures = 0
    emitted = 0
    with walker:
        for outcome in walker.outcomes():
            if outcome.error is not None:
                failures += 1
                click.echo(f"error: {outcome.error}", err=True)
                continue
            click.echo(str(outcome.path))
            emitted += 1
            if limit is not None and emitted >= limit:
                break

    if failures:
        raise click.exceptions.Exit(1)


@main.command("settings-path")
def settings_path_command() -> None:
    """Print settings file path."""
    click.echo(str(settings_path()))


@main.command("settings-set")
@click.argument("key")
@click.argument("value")
def settings_set_command(key: str, value: str) -> None:
    """Set a dotted settings KEY (e.g. walk.multithreaded) to a JSON or plain VALUE."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    try:
        updated = SettingsStore().update(key, parsed)
    except KeyError as exc:
        raise click.ClickException(str(exc.args[0]))
    except ValidationError as exc:
        raise click.ClickException(f"Invalid value for {key}: {exc.errors()[0]['msg']}")

    click.echo(json.dumps(updated.model_dump(mode="json"), indent=2, sort_keys=True))


@main.command()
def about() -> None:
    """Show version and project summary."""
    payload = {
        "name": "lazydir",
        "version": __version__,
        "description": "Lazy concurrent directory walker",
    }
    click.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()

"""``flask seed``: load demo accounts, communities and discussions."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from forum.core.extensions import db
from forum.seeds import seed_data

LOGGER = logging.getLogger(__name__)

STAGE_CHOICE = click.Choice(list(seed_data.SEEDERS), case_sensitive=False)


def _report(summary: dict[str, dict[str, int]]) -> None:
    if not summary:
        click.echo("Nothing to seed.")
        return
    width = max(len(name) for name in summary)
    total_new = 0
    for table in sorted(summary):
        counters = summary[table]
        created = counters.get("created", 0)
        total_new += created
        click.echo(f"{table:<{width}}  new={created:<3} kept={counters.get('existing', 0)}")
    click.echo(f"{total_new} row(s) inserted across {len(summary)} table(s).")


def _refuse_in_production() -> None:
    config = current_app.config
    if config.get("TESTING") or config.get("DEBUG"):
        return
    if str(config.get("APP_ENV", "")).lower() == "production":
        raise click.UsageError("'flask seed fresh' cannot run against a production app.")


def _seed(stages: tuple[str, ...], verbose: bool) -> None:
    try:
        summary = seed_data.run_all(db, stages=stages or None, verbose=verbose)
    except Exception as exc:  # pragma: no cover - CLI safeguard
        db.session.rollback()
        LOGGER.exception("Seeding aborted")
        raise click.ClickException(f"Seeding failed: {exc}") from exc
    _report(summary)


@click.group("seed")
@click.option("-v", "--verbose", is_flag=True, help="Log each seed stage as it runs.")
@click.pass_context
def seed_cli(ctx: click.Context, verbose: bool) -> None:
    """Demo data for local development."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.getLogger("forum.seeds").setLevel(logging.DEBUG if verbose else logging.INFO)


@seed_cli.command("run")
@click.option(
    "--only",
    "stages",
    multiple=True,
    type=STAGE_CHOICE,
    help="Restrict seeding to a stage; repeat to pick several.",
)
@click.pass_context
@with_appcontext
def run_command(ctx: click.Context, stages: tuple[str, ...]) -> None:
    """Insert any missing demo rows; existing rows are left untouched."""
    _seed(stages, bool(ctx.obj.get("verbose")))


@seed_cli.command("fresh")
@click.option("--yes", is_flag=True, help="Do not ask before dropping tables.")
@click.pass_context
@with_appcontext
def fresh_command(ctx: click.Context, yes: bool) -> None:
    """Rebuild the schema from the models and load every seed stage."""
    _refuse_in_production()
    if not yes:
        click.confirm("Every forum table will be dropped. Continue?", abort=True)
    db.session.remove()
    db.drop_all()
    db.create_all()
    LOGGER.info("Schema rebuilt from model metadata")
    _seed((), bool(ctx.obj.get("verbose")))

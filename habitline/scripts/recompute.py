"""CLI command for rebuilding cached streak columns.

Usage:
    flask recompute-streaks                  # Every habit
    flask recompute-streaks --user alice     # One user's habits
    flask recompute-streaks --date 2024-01-31
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext


@click.command("recompute-streaks")
@click.option("--user", "-u", "user_id", type=str, help="Recompute for a specific user id only")
@click.option("--date", "-d", "reference", type=str, help="Reference day (YYYY-MM-DD), default today")
@with_appcontext
def recompute_streaks_command(user_id: str | None, reference: str | None):
    """Recompute current/best streak and total completions from stored completions."""
    from habitline.core.utils.dates import resolve_day
    from habitline.domains.habits.services import recompute_all

    try:
        reference_day = resolve_day(reference)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--date") from exc

    scope = f"user {user_id}" if user_id else "all users"
    click.echo(f"Recomputing streaks for {scope} as of {reference_day.isoformat()}...")
    count = recompute_all(user_id, reference_date=reference_day)
    click.echo(f"  ✓ Updated {count} habits")


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(recompute_streaks_command)

import click
from flask import current_app

from .generation import generator_from_config
from .maintenance import cleanup_challenges, generate_challenges


def register_commands(app):
    """Batch commands meant to be run from cron, e.g. ``flask cleanup-challenges``."""

    @app.cli.command("cleanup-challenges")
    def cleanup_command():
        result = cleanup_challenges(
            retention_days=current_app.config["CHALLENGE_RETENTION_DAYS"],
            grace_days=current_app.config["COMPLETED_GRACE_DAYS"],
        )
        click.echo(
            f"Removed {result['expiredRemoved']} old, deactivated {result['deactivated']}, "
            f"removed {result['playedRemoved']} played challenges."
        )

    @app.cli.command("generate-challenges")
    @click.option("--count", default=3, show_default=True, help="Number of challenges to generate.")
    def generate_command(count):
        created = generate_challenges(generator_from_config(current_app.config), count)
        click.echo(f"Generated {len(created)}/{count} challenges.")

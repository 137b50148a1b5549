"""Flask CLI commands for Smart Finance Tracker."""

from __future__ import annotations

import click


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("smartfinance-init-db")
    def smartfinance_init_db() -> None:
        """Create any missing tables."""

        from .extensions import get_engine
        from .infra.database import init_database

        init_database(get_engine())
        click.echo("Database tables are ready.")

    @app.cli.command("smartfinance-seed")
    @click.option("--demo", is_flag=True, default=False, help="Seed a demo user with sample data")
    def smartfinance_seed(demo: bool) -> None:
        """Seed application data (demo)."""

        if not demo:
            click.echo("No action specified. Use --demo to seed demo data.")
            return

        from .extensions import get_session_factory
        from .seed import DEMO_PASSWORD, run_demo_seed

        email = run_demo_seed(get_session_factory())
        if email is None:
            click.echo("Demo user already exists; nothing to do.")
        else:
            click.echo(f"Demo data seeded. Sign in as {email} / {DEMO_PASSWORD}")

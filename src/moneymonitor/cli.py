"""Flask CLI commands for MoneyMonitor."""

from __future__ import annotations

import click
from flask import Flask

from .errors import LedgerError


def init_app(app: Flask) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("moneymonitor-init-db")
    def moneymonitor_init_db() -> None:
        """Create the ledger tables if they are missing."""

        from .extensions import get_context
        from .infra.database import init_database

        context = get_context()
        init_database(context.engine)
        click.echo(f"Database ready: {context.config.DATABASE_URL}")

    @app.cli.command("moneymonitor-provision")
    @click.option("--email", required=True, help="Email of the user to create")
    @click.option("--name", "display_name", default="", help="Display name")
    def moneymonitor_provision(email: str, display_name: str) -> None:
        """Create a user together with their cash account."""

        from .extensions import get_context

        try:
            result = get_context().ledger.provision_user(email, display_name)
        except LedgerError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"User {result.user.id} created; cash account {result.cash_account.id}")

    @app.cli.command("moneymonitor-summary")
    @click.option("--user-id", required=True, type=int, help="User to summarize")
    def moneymonitor_summary(user_id: int) -> None:
        """Print the dashboard figures for a user."""

        from .extensions import get_context

        try:
            summary = get_context().dashboard.get_summary(user_id)
        except LedgerError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"Total balance:   {summary.total_balance}")
        click.echo(f"Cash on hand:    {summary.cash_on_hand}")
        click.echo(f"Month income:    {summary.month_income}")
        click.echo(f"Month expenses:  {summary.month_expenses}")
        click.echo(f"Month net:       {summary.month_net}")
        click.echo(f"Total debt:      {summary.total_debt}")
        for view in summary.recent_transactions:
            click.echo(f"  {view.occurred_at:%Y-%m-%d} {view.amount:>12} {view.category} {view.description}")

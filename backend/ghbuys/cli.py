from __future__ import annotations

import os

import click
from flask import current_app

from ghbuys.jobs.payment_reconciler import reconcile_pending_payments
from ghbuys.jobs.seed import seed_admin, seed_demo_catalog


def register_cli(app) -> None:
    @app.cli.command("seed")
    @click.option("--demo/--no-demo", default=True, help="Also create a demo vendor with products.")
    def seed(demo: bool):
        """Create the admin account from ADMIN_EMAIL / ADMIN_PASSWORD and demo data."""
        email = os.getenv("ADMIN_EMAIL") or current_app.config.get("ADMIN_EMAIL")
        password = os.getenv("ADMIN_PASSWORD")
        user, created = seed_admin(email, password)
        if user is None:
            click.echo("Skipping admin: set ADMIN_EMAIL and ADMIN_PASSWORD")
        else:
            click.echo(f"Admin {'created' if created else 'exists'}: {user.email} (id={user.id})")
        if demo:
            out = seed_demo_catalog()
            click.echo(f"Demo vendor {out['vendor_id']} ({'created' if out['created'] else 'exists'}), {out['products']} products")

    @app.cli.command("reconcile-payments")
    @click.option("--older-than", "older_than", default=30, show_default=True, help="Minutes a payment must be pending.")
    @click.option("--limit", default=200, show_default=True)
    def reconcile_payments(older_than: int, limit: int):
        """Re-verify stale pending payments and report open dead letters."""
        out = reconcile_pending_payments(
            older_than_minutes=older_than,
            limit=limit,
            commission_rate=current_app.config.get("PLATFORM_COMMISSION_RATE", 0.05),
            currency=current_app.config.get("STORE_CURRENCY", "GHS"),
        )
        click.echo(
            f"checked={out['checked']} settled={out['settled']} "
            f"open_dead_letters={out['open_dead_letters']} issues={len(out['issues'])}"
        )

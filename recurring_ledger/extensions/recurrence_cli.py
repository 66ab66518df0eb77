from __future__ import annotations

import json
from datetime import date, datetime
from typing import Optional

import click
from flask import Flask, current_app

from recurring_ledger.schemas import (
    RecurrenceRunResultSchema,
    RecurringTransactionSchema,
)
from recurring_ledger.services.recurrence_service import RecurrenceService
from recurring_ledger.services.recurrence_store import SQLAlchemyRecurrenceStore

REFERENCE_DATE_FORMAT = "%Y-%m-%d"


def _resolve_reference_date(cli_value: Optional[datetime]) -> date:
    if cli_value is None:
        return date.today()
    return cli_value.date()


def register_recurrence_commands(app: Flask) -> None:
    @app.cli.group("recurring-transactions")
    def recurring_transactions_group() -> None:
        """Operational commands for recurring transaction templates."""

    @recurring_transactions_group.command("process")
    @click.option(
        "--reference-date",
        type=click.DateTime(formats=[REFERENCE_DATE_FORMAT]),
        default=None,
        help="Date treated as today (defaults to the current date).",
    )
    def process_command(reference_date: Optional[datetime]) -> None:
        if not current_app.config["RECURRENCE_PROCESSING_ENABLED"]:
            click.echo(
                "recurring processing disabled (RECURRENCE_PROCESSING_ENABLED=false)"
            )
            return

        result = RecurrenceService.process_recurring_transactions(
            reference_date=_resolve_reference_date(reference_date)
        )
        click.echo(json.dumps(RecurrenceRunResultSchema().dump(result)))

    @recurring_transactions_group.command("eligible")
    @click.option(
        "--reference-date",
        type=click.DateTime(formats=[REFERENCE_DATE_FORMAT]),
        default=None,
        help="Date treated as today (defaults to the current date).",
    )
    def eligible_command(reference_date: Optional[datetime]) -> None:
        today = _resolve_reference_date(reference_date)
        templates = SQLAlchemyRecurrenceStore().select_eligible_templates(today)
        payload = {
            "reference_date": today.isoformat(),
            "templates": RecurringTransactionSchema(many=True).dump(templates),
            "total": len(templates),
        }
        click.echo(json.dumps(payload, sort_keys=True))

from __future__ import annotations

from datetime import date
from decimal import Decimal

from recurring_ledger.extensions.database import db
from recurring_ledger.models.account import Account
from recurring_ledger.models.recurring_transaction import RecurringTransaction
from recurring_ledger.models.user import User
from recurring_ledger.services.recurrence_store import SQLAlchemyRecurrenceStore

TODAY = date(2026, 6, 20)


def _seed_templates() -> dict[str, object]:
    user = User(name="eligibility", email="eligibility@email.com")
    db.session.add(user)
    db.session.flush()
    account = Account(user_id=user.id, name="Wallet")
    db.session.add(account)
    db.session.flush()

    def _template(description: str, **overrides) -> RecurringTransaction:
        values = {
            "user_id": user.id,
            "account_id": account.id,
            "amount": Decimal("10.00"),
            "description": description,
            "day_of_month": 25,
            "start_date": date(2026, 1, 1),
        }
        values.update(overrides)
        return RecurringTransaction(**values)

    templates = [
        _template("never processed"),
        _template("inactive", is_active=False),
        _template("ended yesterday", end_date=date(2026, 6, 19)),
        _template("ends today", end_date=date(2026, 6, 20)),
        _template("done this month", last_processed=date(2026, 6, 5)),
        _template("backlog from last month", last_processed=date(2026, 5, 25)),
        _template("future watermark late day", last_processed=date(2026, 7, 25)),
        _template(
            "future watermark early day",
            day_of_month=10,
            last_processed=date(2026, 7, 10),
        ),
    ]
    db.session.add_all(templates)
    db.session.commit()
    return {template.description: template.id for template in templates}


def test_select_eligible_templates_applies_all_predicates(app) -> None:
    with app.app_context():
        ids = _seed_templates()

        selected = SQLAlchemyRecurrenceStore().select_eligible_templates(TODAY)

        assert {template.description for template in selected} == {
            "never processed",
            "ends today",
            "backlog from last month",
            "future watermark early day",
        }
        assert ids["inactive"] not in {template.id for template in selected}


def test_select_eligible_templates_handles_year_boundary(app) -> None:
    with app.app_context():
        user = User(name="boundary", email="boundary@email.com")
        db.session.add(user)
        db.session.flush()
        account = Account(user_id=user.id, name="Wallet")
        db.session.add(account)
        db.session.flush()
        template = RecurringTransaction(
            user_id=user.id,
            account_id=account.id,
            amount=Decimal("10.00"),
            day_of_month=28,
            start_date=date(2025, 1, 1),
            last_processed=date(2025, 12, 28),
        )
        db.session.add(template)
        db.session.commit()

        selected = SQLAlchemyRecurrenceStore().select_eligible_templates(
            date(2026, 1, 3)
        )

        assert [item.id for item in selected] == [template.id]

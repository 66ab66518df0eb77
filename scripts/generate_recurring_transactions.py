from datetime import date

from recurring_ledger import create_app
from recurring_ledger.services.recurrence_service import RecurrenceService


def main() -> None:
    app = create_app()
    with app.app_context():
        result = RecurrenceService.process_recurring_transactions(
            reference_date=date.today()
        )
        print(f"Recurring transactions created: {result.processed}")


if __name__ == "__main__":
    main()

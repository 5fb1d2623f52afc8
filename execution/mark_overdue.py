"""Run one overdue-invoice sweep from the command line (e.g. from cron)."""

import logging
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from auto_organize.app import shutdown, startup
from auto_organize.config import Config


def main():
    logging.basicConfig(level=Config.LOG_LEVEL)
    today = date.fromisoformat(sys.argv[1]) if len(sys.argv) > 1 else None

    services = startup()
    try:
        changed = services.invoices.mark_overdue_invoices(today=today)
        overdue = services.invoices.get_all(status="overdue")
    finally:
        shutdown(services)

    print(f"Marked {changed} invoice(s) overdue")
    print(f"{len(overdue)} invoice(s) currently overdue")


if __name__ == "__main__":
    main()

"""Application entry point: owns the store handle and the overdue sweep."""

import logging
import signal
import sys

from PySide6.QtCore import QCoreApplication

from auto_organize.config import Config
from auto_organize.database.connection import DatabaseConnection
from auto_organize.database.repository import Repository
from auto_organize.database.schema import initialize_database
from auto_organize.ledger.background import OverdueSweepManager
from auto_organize.ledger.invoices import InvoiceLedger
from auto_organize.ledger.payments import PaymentRecorder
from auto_organize.utils.constants import (
    APP_NAME,
    APP_ORGANIZATION,
    APP_VERSION,
)

logger = logging.getLogger(__name__)


class Services:
    """Everything built from one database handle.

    Created by ``startup`` and released by ``shutdown``; the handle is
    passed down explicitly rather than kept in a module global.
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db
        self.repo = Repository(db)
        self.invoices = InvoiceLedger(db)
        self.payments = PaymentRecorder(db)
        self.sweeper: OverdueSweepManager | None = None


def startup(db_path=None) -> Services:
    """Open the database, create the schema, and build the services."""
    db = DatabaseConnection(
        db_path or Config.DATABASE_PATH, timeout=Config.DATABASE_TIMEOUT
    )
    initialize_database(db)
    logger.info(f"Database ready at {db.db_path}")
    return Services(db)


def shutdown(services: Services):
    """Stop background work started against the services."""
    if services.sweeper is not None:
        services.sweeper.stop()
        services.sweeper = None
    logger.info("Shut down")


def main():
    """Run the ledger service: sweep now, then on the configured interval."""
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QCoreApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_ORGANIZATION)
    app.setApplicationVersion(APP_VERSION)

    services = startup()
    services.sweeper = OverdueSweepManager(services.invoices)
    services.sweeper.sweep_completed.connect(
        lambda n: logger.info(f"Overdue sweep changed {n} invoice(s)")
    )
    services.sweeper.start()

    # Ctrl+C ends the event loop
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    app.aboutToQuit.connect(lambda: shutdown(services))

    sys.exit(app.exec())


if __name__ == "__main__":
    main()

"""Background overdue sweep: runs the invoice sweep on a QTimer."""

import logging
import sqlite3

from PySide6.QtCore import QObject, QTimer, Signal

from auto_organize.config import Config
from auto_organize.ledger.invoices import InvoiceLedger

logger = logging.getLogger(__name__)


class OverdueSweepManager(QObject):
    """Periodically marks past-due invoices overdue.

    The timer fires on the thread that owns this object, so a sweep never
    runs concurrently with other ledger calls made from that thread.
    """

    sweep_completed = Signal(int)  # invoices changed
    sweep_failed = Signal(str)  # error text

    def __init__(self, ledger: InvoiceLedger, parent=None):
        super().__init__(parent)
        self.ledger = ledger
        self._timer: QTimer | None = None
        self._enabled = False
        self._last_count: int | None = None

    def _get_interval_ms(self) -> int:
        """Get interval in milliseconds from Config (minutes -> ms)."""
        return max(Config.OVERDUE_SWEEP_INTERVAL, 1) * 60 * 1000  # Minimum 1 minute

    def start(self, run_immediately: bool = True):
        """Start the sweep timer, optionally sweeping once right away."""
        if self._enabled:
            return
        self._enabled = True
        self._timer = QTimer(self)
        self._timer.timeout.connect(self.run_now)
        self._timer.start(self._get_interval_ms())
        if run_immediately:
            self.run_now()

    def stop(self):
        """Stop the sweep timer."""
        self._enabled = False
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def run_now(self) -> int:
        """Run one sweep; failures are logged and signalled, not raised."""
        try:
            count = self.ledger.mark_overdue_invoices()
        except sqlite3.Error as e:
            logger.error(f"Overdue sweep failed: {e}")
            self.sweep_failed.emit(str(e))
            return 0
        self._last_count = count
        self.sweep_completed.emit(count)
        return count

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def interval_ms(self) -> int:
        return self._timer.interval() if self._timer else self._get_interval_ms()

    @property
    def last_count(self) -> int | None:
        """Invoices changed by the last successful sweep, None if never run."""
        return self._last_count

"""Payment recorder: applies and retracts payments against invoices."""

import dataclasses
import logging
import sqlite3
from datetime import date, datetime
from typing import Optional

from auto_organize.database.connection import DatabaseConnection
from auto_organize.database.models import Payment
from auto_organize.ledger.errors import (
    InvoiceNotFoundError,
    LedgerError,
    PaymentNotFoundError,
)
from auto_organize.ledger.status import reconcile_invoice, total_paid
from auto_organize.utils.formatters import round_money

logger = logging.getLogger(__name__)


class PaymentRecorder:
    """Owns payment rows; every write re-derives invoice and job status."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    # ── Queries ─────────────────────────────────────────────────

    def get_payments(self, invoice_id: int) -> list[Payment]:
        rows = self.db.query_all(
            "SELECT * FROM payments WHERE invoice_id = ? "
            "ORDER BY payment_date DESC, id DESC",
            (invoice_id,),
        )
        return [Payment(**dict(r)) for r in rows]

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        row = self.db.query_one(
            "SELECT * FROM payments WHERE id = ?", (payment_id,)
        )
        return Payment(**dict(row)) if row else None

    def get_payment_or_raise(self, payment_id: int) -> Payment:
        payment = self.get_payment(payment_id)
        if payment is None:
            raise PaymentNotFoundError(
                f"Payment with ID {payment_id} not found"
            )
        return payment

    def get_total_paid(self, invoice_id: int) -> float:
        return total_paid(self.db, invoice_id)

    def get_balance_due(self, invoice_id: int) -> float:
        """Invoice total minus payments, never below zero."""
        row = self.db.query_one(
            "SELECT total_amount FROM invoices WHERE id = ?", (invoice_id,)
        )
        if row is None:
            raise InvoiceNotFoundError("Invoice not found")
        balance = round_money(row["total_amount"] - self.get_total_paid(invoice_id))
        return max(balance, 0.0)

    # ── Writes ──────────────────────────────────────────────────

    def add_payment(self, payment: Payment) -> Payment:
        """Record a payment and reconcile invoice and job status.

        The insert, the invoice status and the job's payment_status,
        status and payment_method all commit together or not at all.
        """
        if payment.amount <= 0:
            raise LedgerError("Payment amount must be greater than zero")
        now = datetime.now().isoformat(timespec="seconds")
        payment_date = payment.payment_date or date.today().isoformat()

        def _add(tx):
            if tx.query_one(
                "SELECT id FROM invoices WHERE id = ?", (payment.invoice_id,)
            ) is None:
                raise InvoiceNotFoundError("Invoice not found")
            payment_id = tx.insert(
                "INSERT INTO payments "
                "(invoice_id, amount, payment_method, payment_date, "
                "notes, created_at) VALUES (?, ?, ?, ?, ?, ?)",
                (payment.invoice_id, payment.amount, payment.payment_method,
                 payment_date, payment.notes or None, now),
            )
            status = reconcile_invoice(
                tx, payment.invoice_id, now,
                payment_method=payment.payment_method,
            )
            return payment_id, status

        try:
            payment_id, status = self.db.transaction(_add)
        except Exception as e:
            logger.error(f"Error adding payment: {e}")
            raise

        logger.info(
            f"Recorded payment of {payment.amount:.2f} on invoice "
            f"{payment.invoice_id}; invoice is now {status}"
        )
        return dataclasses.replace(
            payment, id=payment_id, payment_date=payment_date, created_at=now,
        )

    def delete_payment(self, payment_id: int) -> bool:
        """Remove a payment and re-derive status from what remains.

        Deleting the only payment returns the invoice (and job
        payment_status) to ``issued``. Returns False when the payment does
        not exist or the delete fails.
        """
        payment = self.get_payment(payment_id)
        if payment is None:
            return False
        now = datetime.now().isoformat(timespec="seconds")

        def _delete(tx):
            tx.run_write("DELETE FROM payments WHERE id = ?", (payment_id,))
            return reconcile_invoice(tx, payment.invoice_id, now)

        try:
            status = self.db.transaction(_delete)
        except (sqlite3.Error, LedgerError) as e:
            logger.error(f"Error deleting payment {payment_id}: {e}")
            return False

        logger.info(
            f"Deleted payment {payment_id}; invoice "
            f"{payment.invoice_id} is now {status}"
        )
        return True

    def pay_balance(self, invoice_id: int, payment_method: str,
                    payment_date: str = None,
                    notes: str = "") -> Optional[Payment]:
        """Record a payment for whatever is still owed on an invoice.

        Returns None without writing when nothing is owed.
        """
        balance = self.get_balance_due(invoice_id)
        if balance <= 0:
            return None
        return self.add_payment(Payment(
            invoice_id=invoice_id,
            amount=balance,
            payment_method=payment_method,
            payment_date=payment_date or date.today().isoformat(),
            notes=notes,
        ))

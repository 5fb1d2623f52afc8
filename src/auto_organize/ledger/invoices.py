"""Invoice ledger: invoice numbers, lifecycle writes, and the overdue sweep."""

import dataclasses
import logging
import sqlite3
from datetime import date, datetime, timedelta
from typing import Optional

from auto_organize.config import Config
from auto_organize.database.connection import DatabaseConnection
from auto_organize.database.models import Invoice, InvoiceTotals
from auto_organize.ledger.errors import (
    ActiveInvoiceError,
    InvoiceNotFoundError,
    LedgerError,
)
from auto_organize.ledger.status import (
    JOB_COMPLETED,
    JOB_INVOICED,
    JOB_PAID,
    OVERDUE,
    PAID,
    PARTIAL,
    active_invoice,
)
from auto_organize.utils.constants import (
    INVOICE_STATUSES,
    SWEEPABLE_INVOICE_STATUSES,
)
from auto_organize.utils.formatters import round_money

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


class InvoiceLedger:
    """Owns invoice rows and the job fields they project onto."""

    _DETAILS_SELECT = """
        SELECT i.*,
               j.title AS job_title,
               j.client_id AS client_id,
               COALESCE(c.first_name || ' ' || c.last_name, '')
                   AS client_name,
               COALESCE(v.year || ' ' || v.make || ' ' || v.model, '')
                   AS vehicle_info
        FROM invoices i
        JOIN jobs j ON i.job_id = j.id
        LEFT JOIN clients c ON j.client_id = c.id
        LEFT JOIN vehicles v ON j.vehicle_id = v.id
    """

    def __init__(self, db: DatabaseConnection, prefix: str = None):
        self.db = db
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        if self._prefix:
            return self._prefix
        return Config.INVOICE_NUMBER_PREFIX

    # ── Queries ─────────────────────────────────────────────────

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        row = self.db.query_one(
            "SELECT * FROM invoices WHERE id = ?", (invoice_id,)
        )
        return Invoice(**dict(row)) if row else None

    def get_invoice_with_details(self, invoice_id: int) -> Optional[Invoice]:
        """Invoice plus job title, client name and vehicle description."""
        row = self.db.query_one(
            self._DETAILS_SELECT + " WHERE i.id = ?", (invoice_id,)
        )
        return Invoice(**dict(row)) if row else None

    def get_by_job_id(self, job_id: int) -> Optional[Invoice]:
        row = self.db.query_one(
            "SELECT * FROM invoices WHERE job_id = ? "
            "ORDER BY created_at DESC, id DESC LIMIT 1",
            (job_id,),
        )
        return Invoice(**dict(row)) if row else None

    def get_all(self, status: str = None) -> list[Invoice]:
        if status:
            rows = self.db.query_all(
                self._DETAILS_SELECT
                + " WHERE i.status = ? ORDER BY i.issued_date DESC, i.id DESC",
                (status,),
            )
        else:
            rows = self.db.query_all(
                self._DETAILS_SELECT
                + " ORDER BY i.issued_date DESC, i.id DESC"
            )
        return [Invoice(**dict(r)) for r in rows]

    def get_by_client_id(self, client_id: int) -> list[Invoice]:
        rows = self.db.query_all(
            self._DETAILS_SELECT
            + " WHERE j.client_id = ? ORDER BY i.issued_date DESC, i.id DESC",
            (client_id,),
        )
        return [Invoice(**dict(r)) for r in rows]

    def get_count(self) -> int:
        row = self.db.query_one("SELECT COUNT(*) AS cnt FROM invoices")
        return row["cnt"] if row else 0

    def get_overdue_count(self, today: date = None) -> int:
        """Invoices the next sweep would mark overdue."""
        today = today or date.today()
        row = self.db.query_one(
            "SELECT COUNT(*) AS cnt FROM invoices "
            "WHERE status IN (?, ?) AND due_date < ?",
            (*SWEEPABLE_INVOICE_STATUSES, today.isoformat()),
        )
        return row["cnt"] if row else 0

    # ── Invoice numbers ─────────────────────────────────────────

    def _next_invoice_number(self, reader, today: date) -> str:
        day_prefix = f"{self.prefix}-{today.strftime('%Y%m%d')}"
        row = reader.query_one(
            "SELECT invoice_number FROM invoices "
            "WHERE invoice_number LIKE ? "
            "ORDER BY invoice_number DESC LIMIT 1",
            (f"{day_prefix}-%",),
        )
        seq = 1
        if row and row["invoice_number"]:
            try:
                seq = int(row["invoice_number"].rsplit("-", 1)[1]) + 1
            except (ValueError, IndexError):
                seq = 1
        return f"{day_prefix}-{seq:04d}"

    def generate_invoice_number(self, today: date = None) -> str:
        """Next number for the day, e.g. INV-20240115-0008.

        The sequence is the greatest existing same-day number plus one,
        so two callers that both read before either inserts can get the
        same number; the UNIQUE constraint on invoice_number then rejects
        the second insert. ``create`` avoids the window by generating
        inside its own write transaction when the number is left blank.
        """
        return self._next_invoice_number(self.db, today or date.today())

    # ── Totals ──────────────────────────────────────────────────

    @staticmethod
    def calculate_totals(subtotal: float, tax_rate: float = 0.0,
                         discount_amount: float = 0.0) -> InvoiceTotals:
        """Tax is subtotal × rate% rounded to cents; total = sub + tax − disc."""
        if subtotal < 0:
            raise LedgerError("Subtotal cannot be negative")
        if tax_rate < 0:
            raise LedgerError("Tax rate cannot be negative")
        if discount_amount < 0:
            raise LedgerError("Discount amount cannot be negative")
        if discount_amount > subtotal:
            raise LedgerError("Discount amount cannot be greater than subtotal")
        tax_amount = round_money(subtotal * tax_rate / 100)
        return InvoiceTotals(
            subtotal=round_money(subtotal),
            tax_rate=tax_rate,
            tax_amount=tax_amount,
            discount_amount=round_money(discount_amount),
            total_amount=round_money(subtotal + tax_amount - discount_amount),
        )

    def draft_from_job(self, job_id: int, tax_rate: float = None,
                       discount_amount: float = 0.0,
                       today: date = None) -> Invoice:
        """Build an unsaved draft invoice from a job's parts and labor.

        Issued today, due after the configured payment terms, numbered
        with the next free number for today.
        """
        today = today or date.today()
        row = self.db.query_one("""
            SELECT j.id,
                (SELECT COALESCE(SUM(total_cost), 0) FROM job_parts
                 WHERE job_id = j.id) AS parts_total,
                (SELECT COALESCE(SUM(total_cost), 0) FROM labor_entries
                 WHERE job_id = j.id) AS labor_total
            FROM jobs j WHERE j.id = ?
        """, (job_id,))
        if row is None:
            raise LedgerError(f"Job with ID {job_id} not found")

        if tax_rate is None:
            tax_rate = Config.DEFAULT_TAX_RATE
        totals = self.calculate_totals(
            row["parts_total"] + row["labor_total"], tax_rate, discount_amount
        )
        return Invoice(
            job_id=job_id,
            invoice_number=self.generate_invoice_number(today),
            issued_date=today.isoformat(),
            due_date=(
                today + timedelta(days=Config.PAYMENT_TERMS_DAYS)
            ).isoformat(),
            status="draft",
            terms=Config.DEFAULT_INVOICE_TERMS,
            **dataclasses.asdict(totals),
        )

    # ── Writes ──────────────────────────────────────────────────

    @staticmethod
    def _check_status(status: str):
        if status not in INVOICE_STATUSES:
            raise LedgerError(f"Unknown invoice status: {status!r}")

    def create(self, invoice: Invoice, today: date = None) -> Invoice:
        """Insert an invoice and mark its job invoiced, atomically.

        A blank ``invoice_number`` is filled in inside the same write
        transaction. Raises ``ActiveInvoiceError`` when the job already
        references a live (existing, non-canceled) invoice.
        """
        self._check_status(invoice.status)
        now = _now()

        def _create(tx):
            job = tx.query_one(
                "SELECT id FROM jobs WHERE id = ?", (invoice.job_id,)
            )
            if job is None:
                raise LedgerError(f"Job with ID {invoice.job_id} not found")
            current = active_invoice(tx, invoice.job_id)
            if current is not None:
                raise ActiveInvoiceError(
                    invoice.job_id, current["invoice_number"]
                )

            number = invoice.invoice_number or self._next_invoice_number(
                tx, today or date.today()
            )
            invoice_id = tx.insert(
                "INSERT INTO invoices "
                "(job_id, invoice_number, issued_date, due_date, status, "
                "subtotal, tax_rate, tax_amount, discount_amount, "
                "total_amount, notes, terms, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (invoice.job_id, number, invoice.issued_date,
                 invoice.due_date, invoice.status, invoice.subtotal,
                 invoice.tax_rate, invoice.tax_amount,
                 invoice.discount_amount, invoice.total_amount,
                 invoice.notes or None, invoice.terms or None, now, now),
            )
            tx.run_write(
                "UPDATE jobs SET invoice_number = ?, status = ?, "
                "updated_at = ? WHERE id = ?",
                (number, JOB_INVOICED, now, invoice.job_id),
            )
            return invoice_id, number

        try:
            invoice_id, number = self.db.transaction(_create)
        except Exception as e:
            logger.error(f"Error creating invoice: {e}")
            raise

        logger.info(f"Created invoice {number} for job {invoice.job_id}")
        return dataclasses.replace(
            invoice, id=invoice_id, invoice_number=number,
            created_at=now, updated_at=now,
        )

    def update(self, invoice_id: int, invoice: Invoice) -> Invoice:
        """Overwrite an invoice's mutable fields.

        A ``paid`` status marks the job paid; ``partial`` sets only the
        job's payment_status. Other statuses (draft, issued, overdue,
        canceled) leave the job untouched, since job payment_status has
        no value for them.
        """
        previous = self.get_by_id(invoice_id)
        if previous is None:
            raise InvoiceNotFoundError(
                f"Invoice with ID {invoice_id} not found"
            )
        self._check_status(invoice.status)
        now = _now()

        def _update(tx):
            tx.run_write(
                "UPDATE invoices SET "
                "job_id = ?, invoice_number = ?, issued_date = ?, "
                "due_date = ?, status = ?, subtotal = ?, tax_rate = ?, "
                "tax_amount = ?, discount_amount = ?, total_amount = ?, "
                "notes = ?, terms = ?, updated_at = ? "
                "WHERE id = ?",
                (invoice.job_id, invoice.invoice_number,
                 invoice.issued_date, invoice.due_date, invoice.status,
                 invoice.subtotal, invoice.tax_rate, invoice.tax_amount,
                 invoice.discount_amount, invoice.total_amount,
                 invoice.notes or None, invoice.terms or None, now,
                 invoice_id),
            )
            if invoice.invoice_number != previous.invoice_number:
                # Keep the job pointing at its renumbered invoice
                tx.run_write(
                    "UPDATE jobs SET invoice_number = ?, updated_at = ? "
                    "WHERE id = ? AND invoice_number = ?",
                    (invoice.invoice_number, now, previous.job_id,
                     previous.invoice_number),
                )
            if invoice.status == PAID:
                tx.run_write(
                    "UPDATE jobs SET status = ?, payment_status = ?, "
                    "updated_at = ? WHERE id = ?",
                    (JOB_PAID, PAID, now, invoice.job_id),
                )
            elif invoice.status == PARTIAL:
                tx.run_write(
                    "UPDATE jobs SET payment_status = ?, updated_at = ? "
                    "WHERE id = ?",
                    (PARTIAL, now, invoice.job_id),
                )

        try:
            self.db.transaction(_update)
        except Exception as e:
            logger.error(f"Error updating invoice {invoice_id}: {e}")
            raise

        updated = self.get_by_id(invoice_id)
        if updated is None:
            raise LedgerError("Failed to retrieve updated invoice")
        return updated

    def delete(self, invoice_id: int) -> bool:
        """Delete an invoice with its payments.

        The job reverts to ``completed`` with no invoice number only if it
        is still ``invoiced`` and still points at this invoice. A job that
        has moved on (``paid``, or reissued under a new number) is left
        alone. Returns False when the invoice does not exist or the
        delete fails.
        """
        invoice = self.get_by_id(invoice_id)
        if invoice is None:
            return False

        def _delete(tx):
            tx.run_write(
                "DELETE FROM payments WHERE invoice_id = ?", (invoice_id,)
            )
            tx.run_write("DELETE FROM invoices WHERE id = ?", (invoice_id,))
            tx.run_write(
                "UPDATE jobs SET invoice_number = NULL, status = ?, "
                "updated_at = ? WHERE id = ? AND status = ? "
                "AND invoice_number = ?",
                (JOB_COMPLETED, _now(), invoice.job_id, JOB_INVOICED,
                 invoice.invoice_number),
            )

        try:
            self.db.transaction(_delete)
        except sqlite3.Error as e:
            logger.error(f"Error deleting invoice {invoice_id}: {e}")
            return False

        logger.info(f"Deleted invoice {invoice.invoice_number}")
        return True

    def mark_overdue_invoices(self, today: date = None) -> int:
        """Move issued/partial invoices past their due date to overdue.

        Returns the number of invoices changed; a second run with no new
        past-due invoices returns 0. Paid and canceled invoices are never
        touched, and nothing moves back out of overdue here.
        """
        today = today or date.today()
        try:
            changed = self.db.transaction(lambda tx: tx.run_write(
                "UPDATE invoices SET status = ?, updated_at = ? "
                "WHERE status IN (?, ?) AND due_date < ?",
                (OVERDUE, _now(), *SWEEPABLE_INVOICE_STATUSES,
                 today.isoformat()),
            ))
        except sqlite3.Error as e:
            logger.error(f"Error marking overdue invoices: {e}")
            raise

        if changed:
            logger.info(f"Marked {changed} invoice(s) overdue as of {today}")
        return changed

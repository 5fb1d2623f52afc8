"""Payment-status derivation shared by every ledger write.

Invoice and job payment status are never adjusted incrementally. Each
mutation re-sums the invoice's payments and runs them through
``derive_payment_status``, so replaying a write yields the same state.
"""

from auto_organize.ledger.errors import InvoiceNotFoundError
from auto_organize.utils.formatters import round_money

PAID = "paid"
PARTIAL = "partial"
ISSUED = "issued"
OVERDUE = "overdue"
CANCELED = "canceled"

JOB_INVOICED = "invoiced"
JOB_PAID = "paid"
JOB_COMPLETED = "completed"


def derive_payment_status(total_paid: float, invoice_total: float) -> str:
    """Map (sum of payments, invoice total) to paid / partial / issued."""
    if total_paid >= invoice_total:
        return PAID
    if total_paid > 0:
        return PARTIAL
    return ISSUED


def job_status_for(payment_status: str) -> str:
    """Job lifecycle status that mirrors an invoice payment status."""
    return JOB_PAID if payment_status == PAID else JOB_INVOICED


def total_paid(tx, invoice_id: int) -> float:
    """Sum of every payment currently recorded against an invoice."""
    row = tx.query_one(
        "SELECT COALESCE(SUM(amount), 0) AS total_paid "
        "FROM payments WHERE invoice_id = ?",
        (invoice_id,),
    )
    return round_money(row["total_paid"]) if row else 0.0


def active_invoice(reader, job_id: int):
    """The job's live invoice row (any status but canceled), or None.

    Looked up by ``job_id`` rather than through ``jobs.invoice_number``,
    which can still name a canceled or deleted invoice.
    """
    return reader.query_one(
        "SELECT id, invoice_number, status FROM invoices "
        "WHERE job_id = ? AND status != ? "
        "ORDER BY created_at DESC, id DESC LIMIT 1",
        (job_id, CANCELED),
    )


def reconcile_invoice(tx, invoice_id: int, now: str,
                      payment_method: str = None) -> str:
    """Recompute an invoice's status from its payments and push it to the job.

    Runs inside the caller's transaction. The derived status is written to
    the invoice, mirrored onto the job's ``payment_status``, and the job's
    ``status`` becomes ``paid`` or ``invoiced``. ``payment_method`` is
    stamped on the job only when given. Returns the derived status.
    """
    invoice = tx.query_one(
        "SELECT job_id, total_amount FROM invoices WHERE id = ?",
        (invoice_id,),
    )
    if invoice is None:
        raise InvoiceNotFoundError("Invoice not found")

    status = derive_payment_status(
        total_paid(tx, invoice_id), round_money(invoice["total_amount"])
    )
    tx.run_write(
        "UPDATE invoices SET status = ?, updated_at = ? WHERE id = ?",
        (status, now, invoice_id),
    )
    if payment_method is not None:
        tx.run_write(
            "UPDATE jobs SET payment_status = ?, payment_method = ?, "
            "status = ?, updated_at = ? WHERE id = ?",
            (status, payment_method, job_status_for(status), now,
             invoice["job_id"]),
        )
    else:
        tx.run_write(
            "UPDATE jobs SET payment_status = ?, status = ?, updated_at = ? "
            "WHERE id = ?",
            (status, job_status_for(status), now, invoice["job_id"]),
        )
    return status

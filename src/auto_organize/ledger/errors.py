"""Ledger exceptions.

Storage failures are not wrapped: ``sqlite3.Error`` reaches the caller
unchanged after the transaction has rolled back.
"""


class LedgerError(Exception):
    """Base class for invoice and payment rule violations."""


class InvoiceNotFoundError(LedgerError):
    """The targeted invoice does not exist."""


class PaymentNotFoundError(LedgerError):
    """The targeted payment does not exist."""


class ActiveInvoiceError(LedgerError):
    """The job already carries an active (non-deleted) invoice."""

    def __init__(self, job_id: int, invoice_number: str):
        super().__init__(
            f"Job {job_id} already has active invoice {invoice_number}"
        )
        self.job_id = job_id
        self.invoice_number = invoice_number

"""CSV export for invoices and payments."""

import csv
from pathlib import Path

from auto_organize.ledger.invoices import InvoiceLedger
from auto_organize.ledger.payments import PaymentRecorder

INVOICE_CSV_COLUMNS = [
    "invoice_number", "status", "issued_date", "due_date",
    "client", "vehicle", "job", "subtotal", "tax_rate", "tax_amount",
    "discount_amount", "total_amount",
]

PAYMENT_CSV_COLUMNS = [
    "invoice_id", "payment_date", "amount", "payment_method", "notes",
]


def export_invoices_csv(ledger: InvoiceLedger, filepath: str | Path,
                        status: str = None) -> int:
    """Export invoices (optionally one status) to CSV. Returns rows written."""
    invoices = ledger.get_all(status=status)
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=INVOICE_CSV_COLUMNS)
        writer.writeheader()
        for inv in invoices:
            writer.writerow({
                "invoice_number": inv.invoice_number,
                "status": inv.status,
                "issued_date": inv.issued_date,
                "due_date": inv.due_date,
                "client": inv.client_name,
                "vehicle": inv.vehicle_info,
                "job": inv.job_title,
                "subtotal": f"{inv.subtotal:.2f}",
                "tax_rate": inv.tax_rate,
                "tax_amount": f"{inv.tax_amount:.2f}",
                "discount_amount": f"{inv.discount_amount:.2f}",
                "total_amount": f"{inv.total_amount:.2f}",
            })
    return len(invoices)


def export_payments_csv(payments: PaymentRecorder, invoice_id: int,
                        filepath: str | Path) -> int:
    """Export one invoice's payments to CSV. Returns rows written."""
    rows = payments.get_payments(invoice_id)
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=PAYMENT_CSV_COLUMNS)
        writer.writeheader()
        for p in rows:
            writer.writerow({
                "invoice_id": p.invoice_id,
                "payment_date": p.payment_date,
                "amount": f"{p.amount:.2f}",
                "payment_method": p.payment_method,
                "notes": p.notes or "",
            })
    return len(rows)

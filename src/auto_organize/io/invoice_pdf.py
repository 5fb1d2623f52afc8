"""Render a printable one-page invoice PDF.

The page carries the shop header, client and vehicle, the money block
(subtotal, tax, discount, total), the payments recorded so far and the
balance due. A QR code in the header encodes ``AOM:<invoice number>`` so
a printed copy can be scanned back to its record.

Usage::

    from auto_organize.io.invoice_pdf import export_invoice_pdf

    pdf_path = export_invoice_pdf(ledger, payments, invoice_id)
"""

import io
import os
from pathlib import Path

import qrcode
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.units import inch
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from auto_organize.config import Config
from auto_organize.ledger.errors import InvoiceNotFoundError
from auto_organize.ledger.invoices import InvoiceLedger
from auto_organize.ledger.payments import PaymentRecorder
from auto_organize.utils.formatters import format_currency, format_date

PAGE_WIDTH, PAGE_HEIGHT = LETTER
MARGIN = 0.75 * inch
QR_SIZE = 0.9 * inch
FONT_NAME = "Helvetica"
LINE = 0.22 * inch


def export_invoice_pdf(
    ledger: InvoiceLedger,
    payments: PaymentRecorder,
    invoice_id: int,
    output_path: str | Path | None = None,
) -> str:
    """Write the invoice PDF and return its absolute path.

    When *output_path* is None the file goes to
    ``Config.INVOICES_EXPORT_DIRECTORY/<invoice number>.pdf``.
    """
    invoice = ledger.get_invoice_with_details(invoice_id)
    if invoice is None:
        raise InvoiceNotFoundError(f"Invoice with ID {invoice_id} not found")
    paid_rows = payments.get_payments(invoice_id)
    balance = payments.get_balance_due(invoice_id)

    if not output_path:
        output_path = (
            Path(Config.INVOICES_EXPORT_DIRECTORY)
            / f"{invoice.invoice_number}.pdf"
        )
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    c = canvas.Canvas(str(output_path), pagesize=LETTER)
    c.setTitle(f"Invoice {invoice.invoice_number}")

    # Header
    y = PAGE_HEIGHT - MARGIN
    c.setFont(FONT_NAME + "-Bold", 18)
    c.drawString(MARGIN, y - 0.2 * inch, Config.SHOP_NAME)
    c.setFont(FONT_NAME, 9)
    if Config.SHOP_PHONE:
        c.drawString(MARGIN, y - 0.45 * inch, Config.SHOP_PHONE)
    c.drawImage(
        ImageReader(_make_qr_image(f"AOM:{invoice.invoice_number}")),
        PAGE_WIDTH - MARGIN - QR_SIZE,
        y - QR_SIZE,
        width=QR_SIZE,
        height=QR_SIZE,
    )

    y -= QR_SIZE + 0.3 * inch
    c.setFont(FONT_NAME + "-Bold", 14)
    c.drawString(MARGIN, y, f"INVOICE {invoice.invoice_number}")
    c.setFont(FONT_NAME, 10)
    y -= LINE
    c.drawString(MARGIN, y, f"Status: {invoice.status_label}")
    y -= LINE
    c.drawString(MARGIN, y, f"Issued: {format_date(invoice.issued_date)}")
    c.drawString(
        MARGIN + 2.5 * inch, y, f"Due: {format_date(invoice.due_date)}"
    )

    # Bill to
    y -= LINE * 1.5
    c.setFont(FONT_NAME + "-Bold", 10)
    c.drawString(MARGIN, y, "Bill To")
    c.setFont(FONT_NAME, 10)
    for text in (invoice.client_name, invoice.vehicle_info, invoice.job_title):
        if text:
            y -= LINE
            c.drawString(MARGIN, y, text)

    # Totals
    y -= LINE * 1.5
    rows = [("Subtotal", format_currency(invoice.subtotal))]
    if invoice.tax_rate > 0:
        rows.append((f"Tax ({invoice.tax_rate:g}%)",
                     format_currency(invoice.tax_amount)))
    if invoice.discount_amount > 0:
        rows.append(("Discount",
                     f"-{format_currency(invoice.discount_amount)}"))
    rows.append(("Total", format_currency(invoice.total_amount)))
    y = _draw_amount_rows(c, rows, y)

    # Payments
    if paid_rows:
        y -= LINE
        c.setFont(FONT_NAME + "-Bold", 10)
        c.drawString(MARGIN, y, "Payments")
        c.setFont(FONT_NAME, 10)
        y = _draw_amount_rows(c, [
            (f"{format_date(p.payment_date)}  {p.payment_method}",
             format_currency(p.amount))
            for p in paid_rows
        ], y)

    y -= LINE
    c.setFont(FONT_NAME + "-Bold", 12)
    c.drawString(MARGIN, y, "Balance Due")
    c.drawRightString(PAGE_WIDTH - MARGIN, y, format_currency(balance))

    # Notes and terms
    c.setFont(FONT_NAME, 8)
    for block in (invoice.notes, invoice.terms):
        if not block:
            continue
        y -= LINE * 1.5
        for line in block.splitlines():
            c.drawString(MARGIN, y, line)
            y -= 0.15 * inch

    c.save()
    return os.path.abspath(output_path)


def _draw_amount_rows(c, rows: list[tuple[str, str]], y: float) -> float:
    """Label on the left, amount right-aligned; returns the new y."""
    c.setFont(FONT_NAME, 10)
    for label, amount in rows:
        y -= LINE
        c.drawString(MARGIN, y, label)
        c.drawRightString(PAGE_WIDTH - MARGIN, y, amount)
    return y


def _make_qr_image(data: str) -> io.BytesIO:
    """Generate a QR code image and return as a BytesIO buffer."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=1,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf

"""Standalone invoice export: CSV of all invoices, or one invoice as PDF."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from auto_organize.app import shutdown, startup
from auto_organize.io.csv_handler import export_invoices_csv
from auto_organize.io.invoice_pdf import export_invoice_pdf


def main():
    if len(sys.argv) < 3:
        print("Usage: python export_invoices.py csv <output.csv> [status]")
        print("       python export_invoices.py pdf <invoice_id> [output.pdf]")
        sys.exit(1)

    mode = sys.argv[1].lower()
    services = startup()
    try:
        if mode == "csv":
            status = sys.argv[3] if len(sys.argv) > 3 else None
            count = export_invoices_csv(services.invoices, sys.argv[2], status)
            print(f"Exported {count} invoices to {sys.argv[2]}")
        elif mode == "pdf":
            output = sys.argv[3] if len(sys.argv) > 3 else None
            path = export_invoice_pdf(
                services.invoices, services.payments, int(sys.argv[2]), output,
            )
            print(f"Invoice written to {path}")
        else:
            print(f"Unknown mode: {mode}. Use 'csv' or 'pdf'.")
            sys.exit(1)
    finally:
        shutdown(services)


if __name__ == "__main__":
    main()

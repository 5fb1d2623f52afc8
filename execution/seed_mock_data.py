"""Seed the database with realistic mock data for development and demos.

Creates:
  - 4 clients, each with one vehicle
  - 5 jobs with parts and labor
  - invoices covering issued, partial, paid and past-due cases
  - payments against the partial and paid invoices

Run:
    python -m execution.seed_mock_data          (from project root)
    python execution/seed_mock_data.py          (direct)

WARNING: This script INSERTS data. Run against a fresh DB to avoid
duplicates. Delete data/auto_organize.db first for a clean start.
"""

import os
import sys
from datetime import date, timedelta

# Ensure project src is on the path
_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, os.path.join(_ROOT, "src"))

from auto_organize.database.connection import DatabaseConnection
from auto_organize.database.models import (
    Client,
    Job,
    JobPart,
    LaborEntry,
    Payment,
    Vehicle,
)
from auto_organize.database.repository import Repository
from auto_organize.database.schema import initialize_database
from auto_organize.ledger.invoices import InvoiceLedger
from auto_organize.ledger.payments import PaymentRecorder


def seed(repo: Repository, ledger: InvoiceLedger, payments: PaymentRecorder):
    """Populate the database with mock data."""
    today = date.today()

    # ── 1. Clients & vehicles ─────────────────────────────────────
    print("Creating clients and vehicles...")
    clients_data = [
        ("Maria", "Lopez", "555-0101", (2016, "Honda", "Civic")),
        ("Tom", "Becker", "555-0102", (2012, "Ford", "F-150")),
        ("Aisha", "Grant", "555-0103", (2019, "Toyota", "RAV4")),
        ("Sam", "Okafor", "555-0104", (2008, "Subaru", "Outback")),
    ]
    owners = []
    for first, last, phone, (year, make, model) in clients_data:
        cid = repo.create_client(
            Client(first_name=first, last_name=last, phone=phone)
        )
        vid = repo.create_vehicle(
            Vehicle(client_id=cid, year=year, make=make, model=model)
        )
        owners.append((cid, vid))
    print(f"  → {len(owners)} clients created")

    # ── 2. Jobs with parts & labor ────────────────────────────────
    print("Creating jobs...")
    jobs_data = [
        ("Front brake pads and rotors", 0,
         [("Brake pad set", 1, 45.00, 79.99), ("Rotor", 2, 38.00, 64.50)],
         [("Replace pads and rotors", 1.5, 95.00)]),
        ("Alternator replacement", 1,
         [("Alternator (reman)", 1, 140.00, 229.00)],
         [("Remove/install alternator", 2.0, 95.00)]),
        ("60k mile service", 2,
         [("Oil filter", 1, 6.50, 12.99), ("Engine air filter", 1, 11.00, 24.99)],
         [("Scheduled maintenance", 1.0, 95.00)]),
        ("Head gasket", 3,
         [("Head gasket kit", 1, 180.00, 289.00)],
         [("Head gasket R&R", 9.5, 95.00)]),
        ("Check engine light diagnosis", 0,
         [],
         [("Diagnostic", 1.0, 120.00)]),
    ]
    job_ids = []
    for title, owner_idx, parts, labor in jobs_data:
        cid, vid = owners[owner_idx]
        jid = repo.create_job(Job(
            client_id=cid, vehicle_id=vid, title=title, status="completed",
        ))
        for name, qty, cost, price in parts:
            repo.add_job_part(JobPart(
                job_id=jid, name=name, quantity=qty,
                unit_cost=cost, client_price=price,
            ))
        for desc, hours, rate in labor:
            repo.add_labor_entry(LaborEntry(
                job_id=jid, description=desc, hours=hours, rate=rate,
                technician="Dave",
            ))
        job_ids.append(jid)
    print(f"  → {len(job_ids)} jobs created")

    # ── 3. Invoices & payments ────────────────────────────────────
    print("Creating invoices and payments...")
    # (job index, days ago issued, payments as fraction of total)
    invoice_plan = [
        (0, 3, []),
        (1, 10, [0.5]),
        (2, 20, [0.4, None]),  # None pays the balance
        (3, 45, []),
    ]
    for job_idx, days_ago, fractions in invoice_plan:
        issued = today - timedelta(days=days_ago)
        draft = ledger.draft_from_job(job_ids[job_idx], today=issued)
        draft.status = "issued"
        invoice = ledger.create(draft, today=issued)
        for frac in fractions:
            paid_on = (issued + timedelta(days=2)).isoformat()
            if frac is None:
                payments.pay_balance(invoice.id, "Cash", payment_date=paid_on)
                continue
            payments.add_payment(Payment(
                invoice_id=invoice.id,
                amount=round(invoice.total_amount * frac, 2),
                payment_method="Credit Card",
                payment_date=paid_on,
            ))
    overdue = ledger.mark_overdue_invoices(today=today)
    print(f"  → {len(invoice_plan)} invoices created, {overdue} overdue")

    # ── Done ──────────────────────────────────────────────────────
    print("\n✓ Mock data seeded successfully!")
    print(f"  Clients: {len(owners)}")
    print(f"  Jobs: {len(job_ids)} ({len(job_ids) - len(invoice_plan)} not invoiced)")
    print(f"  Invoices: {ledger.get_count()}")


def main():
    from auto_organize.config import Config
    db_path = Config.DATABASE_PATH
    print(f"Database: {db_path}")

    # Confirm if DB exists
    if os.path.exists(db_path):
        resp = input("Database already exists. Seed anyway? (y/N): ").strip().lower()
        if resp != "y":
            print("Aborted.")
            return

    db = DatabaseConnection(db_path)
    initialize_database(db)
    seed(repo=Repository(db), ledger=InvoiceLedger(db),
         payments=PaymentRecorder(db))


if __name__ == "__main__":
    main()

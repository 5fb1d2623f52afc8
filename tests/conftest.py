"""Shared test fixtures."""

import os

import pytest

from auto_organize.database.connection import DatabaseConnection
from auto_organize.database.models import Client, Invoice, Job, Vehicle
from auto_organize.database.repository import Repository
from auto_organize.database.schema import initialize_database
from auto_organize.ledger.invoices import InvoiceLedger
from auto_organize.ledger.payments import PaymentRecorder

# Qt timer tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def db_path(tmp_path):
    """Provide a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def db(db_path):
    """Provide an initialized database connection."""
    conn = DatabaseConnection(db_path)
    initialize_database(conn)
    return conn


@pytest.fixture
def repo(db):
    """Provide a repository with an initialized database."""
    return Repository(db)


@pytest.fixture
def invoices(db):
    return InvoiceLedger(db, prefix="INV")


@pytest.fixture
def payments(db):
    return PaymentRecorder(db)


@pytest.fixture
def client_and_vehicle(repo):
    client_id = repo.create_client(Client(
        first_name="Maria", last_name="Lopez", phone="555-0101",
    ))
    vehicle_id = repo.create_vehicle(Vehicle(
        client_id=client_id, year=2016, make="Honda", model="Civic",
    ))
    return client_id, vehicle_id


@pytest.fixture
def completed_job(repo, client_and_vehicle):
    """A finished job with no invoice yet."""
    client_id, vehicle_id = client_and_vehicle
    job = Job(
        client_id=client_id, vehicle_id=vehicle_id,
        title="Front brakes", status="completed",
    )
    job.id = repo.create_job(job)
    return job


@pytest.fixture
def make_invoice():
    """Factory for unsaved issued invoices with a flat total and no tax."""
    def _make(job_id: int, total: float = 100.00, **overrides) -> Invoice:
        fields = dict(
            job_id=job_id,
            invoice_number="",
            issued_date="2024-01-02",
            due_date="2024-02-01",
            status="issued",
            subtotal=total,
            total_amount=total,
        )
        fields.update(overrides)
        return Invoice(**fields)
    return _make


@pytest.fixture
def invoice(invoices, completed_job, make_invoice):
    """An issued 100.00 invoice against ``completed_job``."""
    return invoices.create(make_invoice(completed_job.id))

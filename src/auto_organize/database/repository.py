"""Repository layer: plain CRUD for clients, vehicles, jobs, parts, labor.

Invoice and payment rows are owned by ``auto_organize.ledger``; nothing
here writes them, and job ``status``/``payment_status`` are only changed
here before a job has an active invoice.
"""

from typing import Optional

from auto_organize.ledger.status import CANCELED, active_invoice

from .connection import DatabaseConnection
from .models import Client, Job, JobPart, LaborEntry, Vehicle


class Repository:
    """Provides the non-ledger database operations for the application."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    # ── Clients ─────────────────────────────────────────────────

    def get_all_clients(self) -> list[Client]:
        rows = self.db.execute(
            "SELECT * FROM clients ORDER BY last_name, first_name"
        )
        return [Client(**dict(r)) for r in rows]

    def get_client_by_id(self, client_id: int) -> Optional[Client]:
        rows = self.db.execute(
            "SELECT * FROM clients WHERE id = ?", (client_id,)
        )
        return Client(**dict(rows[0])) if rows else None

    def create_client(self, client: Client) -> int:
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO clients "
                "(first_name, last_name, phone, email, address, notes) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (client.first_name, client.last_name, client.phone,
                 client.email, client.address, client.notes),
            )
            return cursor.lastrowid

    def update_client(self, client: Client):
        with self.db.get_connection() as conn:
            conn.execute(
                "UPDATE clients SET first_name = ?, last_name = ?, "
                "phone = ?, email = ?, address = ?, notes = ? WHERE id = ?",
                (client.first_name, client.last_name, client.phone,
                 client.email, client.address, client.notes, client.id),
            )

    def delete_client(self, client_id: int):
        """Delete a client; vehicles, jobs and their invoices cascade."""
        with self.db.get_connection() as conn:
            conn.execute("DELETE FROM clients WHERE id = ?", (client_id,))

    # ── Vehicles ────────────────────────────────────────────────

    def get_vehicles_for_client(self, client_id: int) -> list[Vehicle]:
        rows = self.db.execute(
            "SELECT * FROM vehicles WHERE client_id = ? "
            "ORDER BY year DESC, make, model",
            (client_id,),
        )
        return [Vehicle(**dict(r)) for r in rows]

    def get_vehicle_by_id(self, vehicle_id: int) -> Optional[Vehicle]:
        rows = self.db.execute(
            "SELECT * FROM vehicles WHERE id = ?", (vehicle_id,)
        )
        return Vehicle(**dict(rows[0])) if rows else None

    def create_vehicle(self, vehicle: Vehicle) -> int:
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO vehicles "
                "(client_id, year, make, model, color, license_plate, "
                "vin, mileage, notes) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (vehicle.client_id, vehicle.year, vehicle.make,
                 vehicle.model, vehicle.color, vehicle.license_plate,
                 vehicle.vin, vehicle.mileage, vehicle.notes),
            )
            return cursor.lastrowid

    # ── Jobs ────────────────────────────────────────────────────

    def get_all_jobs(self, status: str = None) -> list[Job]:
        if status:
            rows = self.db.execute(
                "SELECT * FROM jobs WHERE status = ? ORDER BY created_at DESC",
                (status,),
            )
        else:
            rows = self.db.execute(
                "SELECT * FROM jobs ORDER BY created_at DESC"
            )
        return [Job(**dict(r)) for r in rows]

    def get_job_by_id(self, job_id: int) -> Optional[Job]:
        rows = self.db.execute("SELECT * FROM jobs WHERE id = ?", (job_id,))
        return Job(**dict(rows[0])) if rows else None

    def create_job(self, job: Job) -> int:
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO jobs "
                "(client_id, vehicle_id, title, description, status, "
                "job_type, total_cost, notes) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (job.client_id, job.vehicle_id, job.title, job.description,
                 job.status, job.job_type, job.total_cost, job.notes),
            )
            return cursor.lastrowid

    def update_job(self, job: Job):
        """Update a job's descriptive fields.

        Ledger-projected fields (invoice_number, payment_status,
        payment_method) are never written here.
        """
        with self.db.get_connection() as conn:
            conn.execute(
                "UPDATE jobs SET title = ?, description = ?, job_type = ?, "
                "total_cost = ?, notes = ?, "
                "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (job.title, job.description, job.job_type,
                 job.total_cost, job.notes, job.id),
            )

    def set_job_status(self, job_id: int, status: str) -> bool:
        """Move a job through its pre-invoice lifecycle.

        Refused (returns False) while the job has a non-canceled invoice,
        because then the ledger owns its status.
        """
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "UPDATE jobs SET status = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE id = ? AND NOT EXISTS ("
                "SELECT 1 FROM invoices "
                "WHERE invoices.job_id = jobs.id AND invoices.status != ?)",
                (status, job_id, CANCELED),
            )
            return cursor.rowcount > 0

    def job_has_active_invoice(self, job_id: int) -> bool:
        return active_invoice(self.db, job_id) is not None

    def delete_job(self, job_id: int):
        with self.db.get_connection() as conn:
            conn.execute("DELETE FROM jobs WHERE id = ?", (job_id,))

    # ── Job Parts ───────────────────────────────────────────────

    def get_job_parts(self, job_id: int) -> list[JobPart]:
        rows = self.db.execute(
            "SELECT * FROM job_parts WHERE job_id = ? ORDER BY id",
            (job_id,),
        )
        return [JobPart(**dict(r)) for r in rows]

    def add_job_part(self, part: JobPart) -> int:
        """Add a part to a job; total is quantity × client price."""
        total = part.quantity * part.client_price
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO job_parts "
                "(job_id, name, part_number, quantity, unit_cost, "
                "client_price, total_cost, supplier, notes) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (part.job_id, part.name, part.part_number, part.quantity,
                 part.unit_cost, part.client_price, total,
                 part.supplier, part.notes),
            )
            return cursor.lastrowid

    def delete_job_part(self, part_id: int):
        with self.db.get_connection() as conn:
            conn.execute("DELETE FROM job_parts WHERE id = ?", (part_id,))

    # ── Labor ───────────────────────────────────────────────────

    def get_labor_entries(self, job_id: int) -> list[LaborEntry]:
        rows = self.db.execute(
            "SELECT * FROM labor_entries WHERE job_id = ? ORDER BY id",
            (job_id,),
        )
        return [LaborEntry(**dict(r)) for r in rows]

    def add_labor_entry(self, entry: LaborEntry) -> int:
        """Add labor to a job; total is hours × rate."""
        total = entry.hours * entry.rate
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO labor_entries "
                "(job_id, description, hours, rate, total_cost, "
                "technician, notes) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (entry.job_id, entry.description, entry.hours, entry.rate,
                 total, entry.technician, entry.notes),
            )
            return cursor.lastrowid

    def get_job_billable_total(self, job_id: int) -> float:
        """Sum of part and labor totals for a job."""
        rows = self.db.execute("""
            SELECT
                (SELECT COALESCE(SUM(total_cost), 0) FROM job_parts
                 WHERE job_id = ?) +
                (SELECT COALESCE(SUM(total_cost), 0) FROM labor_entries
                 WHERE job_id = ?) AS total
        """, (job_id, job_id))
        return float(rows[0]["total"]) if rows else 0.0

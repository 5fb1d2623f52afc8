"""Database schema definition and initialization."""

SCHEMA_VERSION = 1

# Each statement is a separate string to avoid executescript issues
_SCHEMA_STATEMENTS = [
    """CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",

    # Clients table
    """CREATE TABLE IF NOT EXISTS clients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        phone TEXT NOT NULL DEFAULT '',
        email TEXT,
        address TEXT,
        notes TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",

    # Vehicles table
    """CREATE TABLE IF NOT EXISTS vehicles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        client_id INTEGER NOT NULL,
        year INTEGER NOT NULL,
        make TEXT NOT NULL,
        model TEXT NOT NULL,
        color TEXT,
        license_plate TEXT,
        vin TEXT,
        mileage INTEGER,
        notes TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (client_id) REFERENCES clients(id) ON DELETE CASCADE
    )""",

    # Jobs table (status fields are projected from the invoice ledger)
    """CREATE TABLE IF NOT EXISTS jobs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        client_id INTEGER NOT NULL,
        vehicle_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        status TEXT NOT NULL DEFAULT 'scheduled'
            CHECK (status IN ('scheduled', 'in_progress', 'completed',
                              'invoiced', 'paid', 'canceled')),
        job_type TEXT NOT NULL DEFAULT 'repair',
        total_cost REAL NOT NULL DEFAULT 0.00 CHECK (total_cost >= 0),
        invoice_number TEXT,
        payment_status TEXT,
        payment_method TEXT,
        notes TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (client_id) REFERENCES clients(id) ON DELETE CASCADE,
        FOREIGN KEY (vehicle_id) REFERENCES vehicles(id) ON DELETE CASCADE
    )""",

    # Parts installed on a job
    """CREATE TABLE IF NOT EXISTS job_parts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        job_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        part_number TEXT,
        quantity INTEGER NOT NULL DEFAULT 1 CHECK (quantity > 0),
        unit_cost REAL NOT NULL DEFAULT 0.00 CHECK (unit_cost >= 0),
        client_price REAL NOT NULL DEFAULT 0.00 CHECK (client_price >= 0),
        total_cost REAL NOT NULL DEFAULT 0.00 CHECK (total_cost >= 0),
        supplier TEXT,
        notes TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (job_id) REFERENCES jobs(id) ON DELETE CASCADE
    )""",

    # Labor entries on a job
    """CREATE TABLE IF NOT EXISTS labor_entries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        job_id INTEGER NOT NULL,
        description TEXT NOT NULL,
        hours REAL NOT NULL CHECK (hours >= 0),
        rate REAL NOT NULL CHECK (rate >= 0),
        total_cost REAL NOT NULL CHECK (total_cost >= 0),
        technician TEXT,
        notes TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (job_id) REFERENCES jobs(id) ON DELETE CASCADE
    )""",

    # Invoices (owned by the invoice ledger)
    """CREATE TABLE IF NOT EXISTS invoices (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        job_id INTEGER NOT NULL,
        invoice_number TEXT NOT NULL UNIQUE,
        issued_date TEXT NOT NULL,
        due_date TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'draft'
            CHECK (status IN ('draft', 'issued', 'paid', 'partial',
                              'overdue', 'canceled')),
        subtotal REAL NOT NULL DEFAULT 0.00 CHECK (subtotal >= 0),
        tax_rate REAL NOT NULL DEFAULT 0.00 CHECK (tax_rate >= 0),
        tax_amount REAL NOT NULL DEFAULT 0.00 CHECK (tax_amount >= 0),
        discount_amount REAL NOT NULL DEFAULT 0.00
            CHECK (discount_amount >= 0),
        total_amount REAL NOT NULL DEFAULT 0.00 CHECK (total_amount >= 0),
        notes TEXT,
        terms TEXT,
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL,
        FOREIGN KEY (job_id) REFERENCES jobs(id) ON DELETE CASCADE
    )""",

    # Payments (owned by the payment recorder, hard-deleted)
    """CREATE TABLE IF NOT EXISTS payments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        invoice_id INTEGER NOT NULL,
        amount REAL NOT NULL CHECK (amount > 0),
        payment_method TEXT NOT NULL DEFAULT '',
        payment_date TEXT NOT NULL,
        notes TEXT,
        created_at TIMESTAMP NOT NULL,
        FOREIGN KEY (invoice_id) REFERENCES invoices(id) ON DELETE CASCADE
    )""",

    # Indexes
    "CREATE INDEX IF NOT EXISTS idx_vehicles_client ON vehicles(client_id)",
    "CREATE INDEX IF NOT EXISTS idx_jobs_client ON jobs(client_id)",
    "CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status)",
    "CREATE INDEX IF NOT EXISTS idx_job_parts_job ON job_parts(job_id)",
    "CREATE INDEX IF NOT EXISTS idx_labor_entries_job ON labor_entries(job_id)",
    "CREATE INDEX IF NOT EXISTS idx_invoices_job ON invoices(job_id)",
    "CREATE INDEX IF NOT EXISTS idx_invoices_status_due "
    "ON invoices(status, due_date)",
    "CREATE INDEX IF NOT EXISTS idx_payments_invoice ON payments(invoice_id)",

    # Timestamp triggers for the plain CRUD tables
    """CREATE TRIGGER IF NOT EXISTS update_clients_timestamp
    AFTER UPDATE ON clients
    WHEN NEW.updated_at = OLD.updated_at BEGIN
        UPDATE clients SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
    END""",

    """CREATE TRIGGER IF NOT EXISTS update_vehicles_timestamp
    AFTER UPDATE ON vehicles
    WHEN NEW.updated_at = OLD.updated_at BEGIN
        UPDATE vehicles SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
    END""",

    # Record schema version
    f"INSERT OR IGNORE INTO schema_version (version) VALUES ({SCHEMA_VERSION})",
]


def _get_schema_version(conn) -> int:
    """Get the current schema version, or 0 if no schema exists."""
    try:
        row = conn.execute(
            "SELECT MAX(version) as v FROM schema_version"
        ).fetchone()
        return row["v"] if row and row["v"] else 0
    except Exception:
        return 0


def initialize_database(db_connection):
    """Create all tables, indexes, and triggers.

    Safe to call on every startup: an existing schema is left as is.
    """
    with db_connection.get_connection() as conn:
        version = _get_schema_version(conn)

        if version == 0:
            for stmt in _SCHEMA_STATEMENTS:
                conn.execute(stmt)

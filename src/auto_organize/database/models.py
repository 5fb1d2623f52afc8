"""Data models for the database layer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Client:
    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class Vehicle:
    id: Optional[int] = None
    client_id: Optional[int] = None
    year: int = 0
    make: str = ""
    model: str = ""
    color: str = ""
    license_plate: str = ""
    vin: str = ""
    mileage: Optional[int] = None
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def description(self) -> str:
        """'2018 Honda Civic' style label."""
        return f"{self.year} {self.make} {self.model}".strip()


@dataclass
class Job:
    id: Optional[int] = None
    client_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    title: str = ""
    description: str = ""
    status: str = "scheduled"
    job_type: str = "repair"
    total_cost: float = 0.0
    # Written by the invoice ledger, not by job editing
    invoice_number: Optional[str] = None
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class JobPart:
    id: Optional[int] = None
    job_id: Optional[int] = None
    name: str = ""
    part_number: str = ""
    quantity: int = 1
    unit_cost: float = 0.0
    client_price: float = 0.0
    total_cost: float = 0.0
    supplier: str = ""
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class LaborEntry:
    id: Optional[int] = None
    job_id: Optional[int] = None
    description: str = ""
    hours: float = 0.0
    rate: float = 0.0
    total_cost: float = 0.0
    technician: str = ""
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Invoice:
    id: Optional[int] = None
    job_id: Optional[int] = None
    invoice_number: str = ""
    issued_date: str = ""  # YYYY-MM-DD
    due_date: str = ""     # YYYY-MM-DD
    status: str = "draft"  # draft, issued, paid, partial, overdue, canceled
    subtotal: float = 0.0
    tax_rate: float = 0.0  # percent, e.g. 8.25
    tax_amount: float = 0.0
    discount_amount: float = 0.0
    total_amount: float = 0.0
    notes: str = ""
    terms: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # Joined fields (not stored directly)
    job_title: str = field(default="", repr=False)
    client_id: Optional[int] = field(default=None, repr=False)
    client_name: str = field(default="", repr=False)
    vehicle_info: str = field(default="", repr=False)

    @property
    def status_label(self) -> str:
        return self.status.capitalize()


@dataclass
class Payment:
    id: Optional[int] = None
    invoice_id: Optional[int] = None
    amount: float = 0.0
    payment_method: str = ""
    payment_date: str = ""  # YYYY-MM-DD
    notes: str = ""
    created_at: Optional[str] = None


@dataclass
class InvoiceTotals:
    """Money block of an invoice: subtotal, tax, discount, total."""
    subtotal: float = 0.0
    tax_rate: float = 0.0
    tax_amount: float = 0.0
    discount_amount: float = 0.0
    total_amount: float = 0.0

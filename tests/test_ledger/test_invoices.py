"""Tests for the invoice ledger: create, update, delete, totals."""

import sqlite3
from datetime import date

import pytest

from auto_organize.config import Config
from auto_organize.database.models import Job, JobPart, LaborEntry, Payment
from auto_organize.ledger.errors import (
    ActiveInvoiceError,
    InvoiceNotFoundError,
    LedgerError,
)


class TestCreateInvoice:
    def test_create_returns_saved_invoice(self, invoice):
        assert invoice.id is not None
        assert invoice.invoice_number.startswith("INV-")
        assert invoice.created_at == invoice.updated_at

    def test_job_marked_invoiced(self, repo, invoice):
        job = repo.get_job_by_id(invoice.job_id)
        assert job.status == "invoiced"
        assert job.invoice_number == invoice.invoice_number

    def test_fetch_by_id_and_job(self, invoices, invoice):
        assert invoices.get_by_id(invoice.id).total_amount == 100.00
        assert invoices.get_by_job_id(invoice.job_id).id == invoice.id

    def test_missing_job_raises(self, invoices, make_invoice):
        with pytest.raises(LedgerError):
            invoices.create(make_invoice(9999))
        assert invoices.get_count() == 0

    def test_unknown_status_rejected(self, invoices, completed_job,
                                     make_invoice):
        with pytest.raises(LedgerError):
            invoices.create(make_invoice(completed_job.id, status="void"))

    def test_second_active_invoice_rejected(self, invoices, invoice,
                                            make_invoice):
        with pytest.raises(ActiveInvoiceError) as exc:
            invoices.create(make_invoice(invoice.job_id))
        assert exc.value.invoice_number == invoice.invoice_number
        assert invoices.get_count() == 1

    def test_new_invoice_allowed_after_cancel(self, invoices, repo, invoice,
                                              make_invoice):
        canceled = invoices.get_by_id(invoice.id)
        canceled.status = "canceled"
        invoices.update(invoice.id, canceled)

        replacement = invoices.create(make_invoice(invoice.job_id, total=80.0))
        job = repo.get_job_by_id(invoice.job_id)
        assert job.invoice_number == replacement.invoice_number
        assert invoices.get_count() == 2

    def test_duplicate_number_is_storage_failure(
        self, invoices, repo, invoice, client_and_vehicle, make_invoice
    ):
        client_id, vehicle_id = client_and_vehicle
        other_id = repo.create_job(Job(
            client_id=client_id, vehicle_id=vehicle_id, title="Other",
            status="completed",
        ))
        with pytest.raises(sqlite3.IntegrityError):
            invoices.create(make_invoice(
                other_id, invoice_number=invoice.invoice_number,
            ))
        # Nothing from the failed create is visible
        job = repo.get_job_by_id(other_id)
        assert job.status == "completed"
        assert job.invoice_number is None

    def test_failed_job_update_rolls_back_invoice(self, invoices, repo, db,
                                                  completed_job,
                                                  make_invoice):
        db.execute(
            "CREATE TRIGGER lock_jobs BEFORE UPDATE ON jobs "
            "BEGIN SELECT RAISE(ABORT, 'jobs locked'); END"
        )
        with pytest.raises(sqlite3.Error):
            invoices.create(make_invoice(completed_job.id))
        assert invoices.get_count() == 0
        job = repo.get_job_by_id(completed_job.id)
        assert job.status == "completed"
        assert job.invoice_number is None


class TestUpdateInvoice:
    def test_missing_invoice_raises(self, invoices, make_invoice):
        with pytest.raises(InvoiceNotFoundError):
            invoices.update(42, make_invoice(1))

    def test_renumber_moves_job_marker(self, invoices, repo, invoice,
                                       make_invoice):
        edited = invoices.get_by_id(invoice.id)
        edited.invoice_number = "INV-CUSTOM-0001"
        invoices.update(invoice.id, edited)
        assert repo.get_job_by_id(invoice.job_id).invoice_number == (
            "INV-CUSTOM-0001"
        )

        with pytest.raises(ActiveInvoiceError) as exc:
            invoices.create(make_invoice(invoice.job_id))
        assert exc.value.invoice_number == "INV-CUSTOM-0001"
        assert invoices.get_count() == 1

    def test_overwrites_fields(self, invoices, invoice):
        edited = invoices.get_by_id(invoice.id)
        edited.notes = "Customer supplied pads"
        edited.due_date = "2024-03-01"
        edited.total_amount = 125.0
        updated = invoices.update(invoice.id, edited)
        assert updated.notes == "Customer supplied pads"
        assert updated.due_date == "2024-03-01"
        assert updated.total_amount == 125.0

    def test_paid_status_marks_job_paid(self, invoices, repo, invoice):
        edited = invoices.get_by_id(invoice.id)
        edited.status = "paid"
        invoices.update(invoice.id, edited)
        job = repo.get_job_by_id(invoice.job_id)
        assert job.status == "paid"
        assert job.payment_status == "paid"

    def test_partial_status_sets_only_payment_status(self, invoices, repo,
                                                     invoice):
        edited = invoices.get_by_id(invoice.id)
        edited.status = "partial"
        invoices.update(invoice.id, edited)
        job = repo.get_job_by_id(invoice.job_id)
        assert job.status == "invoiced"
        assert job.payment_status == "partial"

    @pytest.mark.parametrize("status", ["draft", "issued", "overdue",
                                        "canceled"])
    def test_other_statuses_leave_job_untouched(self, invoices, repo,
                                                invoice, status):
        edited = invoices.get_by_id(invoice.id)
        edited.status = status
        invoices.update(invoice.id, edited)
        job = repo.get_job_by_id(invoice.job_id)
        assert job.status == "invoiced"
        assert job.payment_status is None


class TestDeleteInvoice:
    def test_missing_invoice_returns_false(self, invoices):
        assert invoices.delete(999) is False

    def test_delete_removes_invoice_and_payments(self, invoices, payments,
                                                 invoice):
        payments.add_payment(Payment(
            invoice_id=invoice.id, amount=30.0, payment_method="Cash",
            payment_date="2024-01-03",
        ))
        assert invoices.delete(invoice.id) is True
        assert invoices.get_by_id(invoice.id) is None
        assert payments.get_payments(invoice.id) == []

    def test_invoiced_job_reverts_to_completed(self, invoices, repo, invoice):
        invoices.delete(invoice.id)
        job = repo.get_job_by_id(invoice.job_id)
        assert job.status == "completed"
        assert job.invoice_number is None

    def test_paid_job_left_alone(self, invoices, payments, repo, invoice):
        payments.add_payment(Payment(
            invoice_id=invoice.id, amount=100.0, payment_method="Cash",
            payment_date="2024-01-03",
        ))
        invoices.delete(invoice.id)
        job = repo.get_job_by_id(invoice.job_id)
        assert job.status == "paid"
        assert job.invoice_number == invoice.invoice_number

    def test_deleting_replaced_invoice_keeps_job(self, invoices, repo,
                                                 invoice, make_invoice):
        canceled = invoices.get_by_id(invoice.id)
        canceled.status = "canceled"
        invoices.update(invoice.id, canceled)
        replacement = invoices.create(make_invoice(invoice.job_id))

        assert invoices.delete(invoice.id) is True
        job = repo.get_job_by_id(invoice.job_id)
        assert job.status == "invoiced"
        assert job.invoice_number == replacement.invoice_number
        with pytest.raises(ActiveInvoiceError):
            invoices.create(make_invoice(invoice.job_id))
        assert not repo.set_job_status(invoice.job_id, "completed")

    def test_storage_failure_returns_false(self, invoices, db, invoice):
        db.execute(
            "CREATE TRIGGER block_invoice_delete BEFORE DELETE ON invoices "
            "BEGIN SELECT RAISE(ABORT, 'locked'); END"
        )
        assert invoices.delete(invoice.id) is False
        assert invoices.get_by_id(invoice.id) is not None


class TestQueries:
    def test_get_all_includes_details(self, invoices, invoice):
        rows = invoices.get_all()
        assert len(rows) == 1
        assert rows[0].client_name == "Maria Lopez"
        assert rows[0].vehicle_info == "2016 Honda Civic"
        assert rows[0].job_title == "Front brakes"

    def test_get_all_filters_by_status(self, invoices, invoice):
        assert invoices.get_all(status="paid") == []
        assert len(invoices.get_all(status="issued")) == 1

    def test_get_by_client(self, invoices, invoice, client_and_vehicle):
        client_id, _ = client_and_vehicle
        assert [i.id for i in invoices.get_by_client_id(client_id)] == [
            invoice.id
        ]
        assert invoices.get_by_client_id(client_id + 1) == []

    def test_invoice_with_details(self, invoices, invoice):
        detailed = invoices.get_invoice_with_details(invoice.id)
        assert detailed.client_id is not None
        assert detailed.invoice_number == invoice.invoice_number

    def test_overdue_count(self, invoices, invoice):
        assert invoices.get_overdue_count(date(2024, 2, 1)) == 0
        assert invoices.get_overdue_count(date(2024, 2, 2)) == 1


class TestTotals:
    def test_tax_and_discount(self, invoices):
        totals = invoices.calculate_totals(200.0, 8.25, 10.0)
        assert totals.tax_amount == 16.50
        assert totals.total_amount == 206.50

    def test_tax_rounds_to_cents(self, invoices):
        totals = invoices.calculate_totals(33.33, 10.0)
        assert totals.tax_amount == 3.33
        assert totals.total_amount == 36.66

    def test_discount_above_subtotal_rejected(self, invoices):
        with pytest.raises(LedgerError):
            invoices.calculate_totals(50.0, 0.0, 60.0)

    def test_negative_discount_rejected(self, invoices):
        with pytest.raises(LedgerError):
            invoices.calculate_totals(50.0, 0.0, -1.0)


class TestDraftFromJob:
    def test_draft_totals_from_parts_and_labor(self, invoices, repo,
                                               completed_job, monkeypatch):
        monkeypatch.setattr(Config, "PAYMENT_TERMS_DAYS", 30)
        repo.add_job_part(JobPart(
            job_id=completed_job.id, name="Pads", quantity=1,
            client_price=80.0,
        ))
        repo.add_labor_entry(LaborEntry(
            job_id=completed_job.id, description="Install",
            hours=2.0, rate=60.0,
        ))
        draft = invoices.draft_from_job(
            completed_job.id, tax_rate=10.0, today=date(2024, 1, 15),
        )
        assert draft.id is None
        assert draft.status == "draft"
        assert draft.subtotal == 200.0
        assert draft.tax_amount == 20.0
        assert draft.total_amount == 220.0
        assert draft.issued_date == "2024-01-15"
        assert draft.due_date == "2024-02-14"
        assert draft.invoice_number == "INV-20240115-0001"

    def test_draft_uses_default_tax_rate(self, invoices, completed_job,
                                         monkeypatch):
        monkeypatch.setattr(Config, "DEFAULT_TAX_RATE", 7.0)
        draft = invoices.draft_from_job(completed_job.id)
        assert draft.tax_rate == 7.0
        assert draft.terms == Config.DEFAULT_INVOICE_TERMS

    def test_draft_for_missing_job(self, invoices):
        with pytest.raises(LedgerError):
            invoices.draft_from_job(12345)

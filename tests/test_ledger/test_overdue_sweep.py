"""Tests for the overdue sweep and its timer-driven manager."""

import sqlite3
from datetime import date

import pytest

from auto_organize.config import Config
from auto_organize.database.models import Job, Payment
from auto_organize.ledger.background import OverdueSweepManager

JAN_5 = date(2024, 1, 5)


@pytest.fixture
def second_job(repo, client_and_vehicle):
    client_id, vehicle_id = client_and_vehicle
    return repo.create_job(Job(
        client_id=client_id, vehicle_id=vehicle_id,
        title="Oil change", status="completed",
    ))


class TestMarkOverdue:
    def test_past_due_issued_invoice_marked(self, invoices, completed_job,
                                            make_invoice):
        inv = invoices.create(make_invoice(
            completed_job.id, due_date="2024-01-01",
        ))
        assert invoices.mark_overdue_invoices(today=JAN_5) == 1
        assert invoices.get_by_id(inv.id).status == "overdue"

    def test_second_run_changes_nothing(self, invoices, completed_job,
                                        make_invoice):
        invoices.create(make_invoice(completed_job.id, due_date="2024-01-01"))
        invoices.mark_overdue_invoices(today=JAN_5)
        assert invoices.mark_overdue_invoices(today=JAN_5) == 0

    def test_due_today_is_not_overdue(self, invoices, completed_job,
                                      make_invoice):
        inv = invoices.create(make_invoice(
            completed_job.id, due_date="2024-01-05",
        ))
        assert invoices.mark_overdue_invoices(today=JAN_5) == 0
        assert invoices.get_by_id(inv.id).status == "issued"

    def test_partial_invoice_is_swept(self, invoices, payments,
                                      completed_job, make_invoice):
        inv = invoices.create(make_invoice(
            completed_job.id, due_date="2024-01-01",
        ))
        payments.add_payment(Payment(
            invoice_id=inv.id, amount=10.0, payment_method="Cash",
            payment_date="2023-12-30",
        ))
        assert invoices.mark_overdue_invoices(today=JAN_5) == 1
        assert invoices.get_by_id(inv.id).status == "overdue"

    @pytest.mark.parametrize("status", ["paid", "canceled", "draft"])
    def test_other_statuses_untouched(self, invoices, completed_job,
                                      make_invoice, status):
        inv = invoices.create(make_invoice(
            completed_job.id, due_date="2024-01-01", status=status,
        ))
        assert invoices.mark_overdue_invoices(today=JAN_5) == 0
        assert invoices.get_by_id(inv.id).status == status

    def test_counts_only_past_due(self, invoices, completed_job, second_job,
                                  make_invoice):
        invoices.create(make_invoice(completed_job.id, due_date="2024-01-01"))
        invoices.create(make_invoice(second_job, due_date="2024-02-01"))
        assert invoices.get_overdue_count(JAN_5) == 1
        assert invoices.mark_overdue_invoices(today=JAN_5) == 1
        assert invoices.get_overdue_count(JAN_5) == 0

    def test_job_payment_status_not_mirrored(self, invoices, repo,
                                             completed_job, make_invoice):
        inv = invoices.create(make_invoice(
            completed_job.id, due_date="2024-01-01",
        ))
        invoices.mark_overdue_invoices(today=JAN_5)
        job = repo.get_job_by_id(inv.job_id)
        assert job.status == "invoiced"
        assert job.payment_status is None


class _BrokenLedger:
    def mark_overdue_invoices(self, today=None):
        raise sqlite3.OperationalError("database is locked")


class TestOverdueSweepManager:
    def test_run_now_emits_count(self, qtbot, invoices, completed_job,
                                 make_invoice):
        invoices.create(make_invoice(completed_job.id, due_date="2000-01-01"))
        manager = OverdueSweepManager(invoices)
        with qtbot.waitSignal(manager.sweep_completed) as blocker:
            manager.run_now()
        assert blocker.args == [1]
        assert manager.last_count == 1

    def test_start_and_stop(self, qtbot, invoices):
        manager = OverdueSweepManager(invoices)
        assert manager.last_count is None
        manager.start(run_immediately=False)
        assert manager.enabled
        assert manager.last_count is None
        manager.stop()
        assert not manager.enabled

    def test_start_sweeps_immediately(self, qtbot, invoices):
        manager = OverdueSweepManager(invoices)
        with qtbot.waitSignal(manager.sweep_completed):
            manager.start()
        manager.stop()
        assert manager.last_count == 0

    def test_failure_is_signalled(self, qtbot):
        manager = OverdueSweepManager(_BrokenLedger())
        with qtbot.waitSignal(manager.sweep_failed) as blocker:
            assert manager.run_now() == 0
        assert "locked" in blocker.args[0]
        assert manager.last_count is None

    def test_interval_from_config(self, qtbot, invoices, monkeypatch):
        monkeypatch.setattr(Config, "OVERDUE_SWEEP_INTERVAL", 15)
        manager = OverdueSweepManager(invoices)
        assert manager.interval_ms == 15 * 60 * 1000

    def test_interval_has_one_minute_floor(self, qtbot, invoices,
                                           monkeypatch):
        monkeypatch.setattr(Config, "OVERDUE_SWEEP_INTERVAL", 0)
        manager = OverdueSweepManager(invoices)
        assert manager.interval_ms == 60 * 1000

"""Tests for payment-status derivation."""

import pytest

from auto_organize.ledger.status import derive_payment_status, job_status_for


class TestDerivePaymentStatus:
    @pytest.mark.parametrize("paid, total, expected", [
        (0.0, 100.0, "issued"),
        (0.01, 100.0, "partial"),
        (60.0, 100.0, "partial"),
        (100.0, 100.0, "paid"),
        (120.0, 100.0, "paid"),
        (0.0, 0.0, "paid"),
    ])
    def test_three_way_rule(self, paid, total, expected):
        assert derive_payment_status(paid, total) == expected


class TestJobStatusFor:
    def test_paid_maps_to_paid(self):
        assert job_status_for("paid") == "paid"

    @pytest.mark.parametrize("status", ["issued", "partial"])
    def test_unpaid_maps_to_invoiced(self, status):
        assert job_status_for(status) == "invoiced"

"""Application-wide constants."""

APP_NAME = "Auto-Organize"
APP_VERSION = "1.0.0"
APP_ORGANIZATION = "GeracomDev"

# Invoice lifecycle
INVOICE_STATUSES = ["draft", "issued", "paid", "partial", "overdue", "canceled"]

# Statuses the overdue sweep may move to 'overdue'
SWEEPABLE_INVOICE_STATUSES = ("issued", "partial")

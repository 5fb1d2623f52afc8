"""Application configuration: loads .env, then overrides from settings.json."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Find the project root (where .env lives)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# Runtime settings file for in-app configuration
_SETTINGS_FILE = _PROJECT_ROOT / "data" / "settings.json"

DEFAULT_INVOICE_TERMS = (
    "1. Payment is due within 30 days of the invoice date.\n"
    "2. Parts are warranted by their manufacturer.\n"
    "3. Labor is guaranteed for 30 days or 1,000 miles, "
    "whichever comes first."
)


def _load_settings() -> dict:
    """Load saved runtime settings from JSON file."""
    if _SETTINGS_FILE.exists():
        try:
            return json.loads(_SETTINGS_FILE.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            pass
    return {}


def _save_settings(settings: dict):
    """Persist runtime settings to JSON file."""
    _SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    _SETTINGS_FILE.write_text(
        json.dumps(settings, indent=2), encoding="utf-8"
    )


# Load saved settings once at import time
_runtime = _load_settings()


class Config:
    """Central configuration: .env defaults, settings.json overrides."""

    # Paths
    PROJECT_ROOT: Path = _PROJECT_ROOT
    DATABASE_PATH: Path = Path(
        os.getenv("DATABASE_PATH",
                  str(_PROJECT_ROOT / "data" / "auto_organize.db"))
    )
    BACKUP_PATH: Path = Path(
        os.getenv("DATABASE_BACKUP_PATH", str(_PROJECT_ROOT / "data" / "backups"))
    )
    # Seconds SQLite waits on a locked database before raising
    DATABASE_TIMEOUT: float = float(os.getenv("DATABASE_TIMEOUT", "5.0"))

    # Invoicing (settings.json overrides .env)
    INVOICE_NUMBER_PREFIX: str = _runtime.get(
        "invoice_number_prefix",
        os.getenv("INVOICE_NUMBER_PREFIX", "INV"),
    )
    PAYMENT_TERMS_DAYS: int = int(_runtime.get(
        "payment_terms_days",
        os.getenv("PAYMENT_TERMS_DAYS", "30"),
    ))
    DEFAULT_TAX_RATE: float = float(_runtime.get(
        "default_tax_rate",
        os.getenv("DEFAULT_TAX_RATE", "0.0"),
    ))
    DEFAULT_INVOICE_TERMS: str = _runtime.get(
        "default_invoice_terms", DEFAULT_INVOICE_TERMS
    )
    INVOICES_EXPORT_DIRECTORY: str = _runtime.get(
        "invoices_export_directory",
        os.getenv("INVOICES_EXPORT_DIRECTORY",
                  str(_PROJECT_ROOT / "data" / "invoices")),
    )

    # Shop details printed on invoice PDFs
    SHOP_NAME: str = _runtime.get(
        "shop_name", os.getenv("SHOP_NAME", "Auto Organize Me")
    )
    SHOP_PHONE: str = _runtime.get(
        "shop_phone", os.getenv("SHOP_PHONE", "")
    )

    # Overdue sweep interval (minutes), persisted in settings.json
    OVERDUE_SWEEP_INTERVAL: int = int(_runtime.get(
        "overdue_sweep_interval",
        os.getenv("OVERDUE_SWEEP_INTERVAL", "60"),
    ))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def update_invoice_settings(cls, prefix: str, terms_days: int,
                                tax_rate: float, terms: str):
        """Update invoicing defaults at runtime and persist to disk."""
        cls.INVOICE_NUMBER_PREFIX = prefix
        cls.PAYMENT_TERMS_DAYS = terms_days
        cls.DEFAULT_TAX_RATE = tax_rate
        cls.DEFAULT_INVOICE_TERMS = terms

        settings = _load_settings()
        settings["invoice_number_prefix"] = prefix
        settings["payment_terms_days"] = terms_days
        settings["default_tax_rate"] = tax_rate
        settings["default_invoice_terms"] = terms
        _save_settings(settings)

    @classmethod
    def update_shop_details(cls, name: str, phone: str):
        """Update the shop header used on exported invoices."""
        cls.SHOP_NAME = name
        cls.SHOP_PHONE = phone

        settings = _load_settings()
        settings["shop_name"] = name
        settings["shop_phone"] = phone
        _save_settings(settings)

    @classmethod
    def update_sweep_interval(cls, minutes: int):
        """Update the overdue sweep interval (in minutes) and persist."""
        cls.OVERDUE_SWEEP_INTERVAL = minutes

        settings = _load_settings()
        settings["overdue_sweep_interval"] = minutes
        _save_settings(settings)

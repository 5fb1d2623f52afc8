"""Database backup script: creates timestamped SQLite backup."""

import sqlite3
import sys
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from auto_organize.config import Config

KEEP_BACKUPS = 10


def backup_database():
    """Copy the database to the backup directory with a timestamp.

    Uses SQLite's online backup so a copy taken mid-transaction is still
    consistent.
    """
    db_path = Config.DATABASE_PATH
    backup_dir = Config.BACKUP_PATH
    backup_dir.mkdir(parents=True, exist_ok=True)

    if not db_path.exists():
        print(f"Database not found at {db_path}")
        return

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_file = backup_dir / f"auto_organize_{timestamp}.db"
    src = sqlite3.connect(str(db_path))
    dst = sqlite3.connect(str(backup_file))
    try:
        src.backup(dst)
    finally:
        dst.close()
        src.close()
    print(f"Backup created: {backup_file}")

    # Keep only the newest backups
    backups = sorted(backup_dir.glob("auto_organize_*.db"), reverse=True)
    for old in backups[KEEP_BACKUPS:]:
        old.unlink()
        print(f"Removed old backup: {old.name}")


if __name__ == "__main__":
    backup_database()

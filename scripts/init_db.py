from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.payroll_ledger.payroll_ledger.database.bootstrap import apply_schema, list_tables

LEDGER_TABLES = (
    "employees",
    "attendance_entries",
    "payroll_records",
    "performance_records",
    "leave_requests",
    "correction_requests",
)


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")

    present = set(list_tables(db_config))
    missing = [t for t in LEDGER_TABLES if t not in present]
    if missing:
        print(f"FAIL: {target} is missing tables: {', '.join(missing)}")
        return 1

    print(f"OK: ledger schema ready on {target} ({len(LEDGER_TABLES)} tables)")
    return 0


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.payroll_ledger.payroll_ledger.container import build_container
from src.payroll_ledger.payroll_ledger.database.bootstrap import apply_seed_sql, seed_demo_attendance


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    container = build_container(db_config=db_config)
    written = seed_demo_attendance(container.employees_repo, container.attendance_repo, calculator=container.calculator)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(attendance entries={written})"
    )


if __name__ == "__main__":
    main()

from __future__ import annotations

import logging
import random
import re
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional

from ..attendance.factory import derive_status
from ..attendance.model import AttendanceEntry, EntryMetadata
from ..attendance.reconciler import is_writable_by
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import iter_days, now_local
from ..common.time_utils import minutes_to_time, to_minutes
from ..core.constants import MINUTES_PER_DAY
from ..core.enums import EntrySource
from ..employees.repository import EmployeeDirectory
from ..payroll.calculator.financial_calculator import FinancialCalculator
from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

DEMO_DAYS = 30


def _connect(db_config: dict, *, with_database: bool = True):
    return DatabaseConnection(DBConfig.from_dict(db_config)).connect(with_database=with_database)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Splits on ';' outside quotes; drops '--' comment lines.
    lines = [ln for ln in sql.splitlines() if not ln.strip().startswith("--")]
    buf: list[str] = []
    quote: Optional[str] = None
    escape = False

    for ch in "\n".join(lines):
        if escape:
            buf.append(ch)
            escape = False
            continue
        if ch == "\\":
            buf.append(ch)
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue
        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_sql_file(db_config: dict, path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    factory = DatabaseConnection(DBConfig.from_dict(db_config))
    database = factory.config.database
    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;")
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_sql_file(db_config, schema_path)
    logger.info("Schema applied from %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_sql_file(db_config, seed_path)
    logger.info("Seed SQL applied from %s", seed_path)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def _clock_time(minutes: int) -> str:
    return minutes_to_time(minutes % MINUTES_PER_DAY)


def seed_demo_attendance(
    employees: EmployeeDirectory,
    attendance: AttendanceRepository,
    *,
    calculator: Optional[FinancialCalculator] = None,
    today: Optional[date] = None,
    days: int = DEMO_DAYS,
    seed: int = 42,
) -> int:
    """Write weekday ledger entries for the last `days` days for every active employee.

    Roughly one day in ten is absent and one in five is late; everything else
    arrives within a few minutes of shift start. Human-locked entries are left
    alone. Returns the number of entries written.
    """

    calculator = calculator or FinancialCalculator()
    rng = random.Random(seed)
    end = today or now_local().date()
    start = end - timedelta(days=days - 1)
    written = 0

    for employee in employees.list_active():
        shift = employee.shift
        start_min = to_minutes(shift.start)
        shift_len = round(shift.scheduled_hours * 60)

        for day in iter_days(start, end):
            if day.weekday() >= 5:
                continue
            if not is_writable_by(attendance.get_for_employee_and_date(employee.employee_id, day), EntrySource.SYSTEM):
                continue

            roll = rng.random()
            if roll < 0.1:
                in_time = out_time = None
            else:
                offset = rng.randint(5, 40) if roll < 0.3 else rng.randint(-10, 0)
                in_min = start_min + offset
                out_min = in_min + shift_len + rng.randint(-15, 30)
                in_time, out_time = _clock_time(in_min), _clock_time(out_min)

            out_next_day = bool(in_time and out_time and to_minutes(out_time) < to_minutes(in_time))
            status = derive_status(in_time=in_time, out_time=out_time, shift=shift)
            financials = calculator.compute(
                status=status,
                in_time=in_time,
                out_time=out_time,
                out_next_day=out_next_day,
                shift=shift,
                hourly_rate=employee.hourly_rate,
            )
            attendance.upsert(
                AttendanceEntry(
                    employee_id=employee.employee_id,
                    work_date=day,
                    employee_number=employee.employee_number,
                    employee_name=employee.full_name,
                    department=employee.department,
                    shift=shift,
                    hourly_rate=employee.hourly_rate,
                    status=status,
                    in_time=in_time,
                    out_time=out_time,
                    out_next_day=out_next_day,
                    financials=financials,
                    metadata=EntryMetadata(source=EntrySource.SYSTEM, last_modified_at=now_local()),
                )
            )
            written += 1

    logger.info("Demo attendance seeded: %s entries (%s..%s)", written, start.isoformat(), end.isoformat())
    return written

from __future__ import annotations

from datetime import date

import mysql.connector

from src.payroll_ledger.payroll_ledger.attendance.inputs import ManualEdit
from src.payroll_ledger.payroll_ledger.core.enums import EntrySource, Ownership
from src.payroll_ledger.payroll_ledger.database.bootstrap import (
    _iter_sql_statements,
    _strip_create_db_and_use,
    ensure_database_exists,
    seed_demo_attendance,
)


def test_sql_splitting_ignores_quoted_semicolons_and_comments():
    sql = """
    -- leading comment
    CREATE DATABASE IF NOT EXISTS other;
    USE other;
    INSERT INTO t (note) VALUES ('a;b');
    INSERT INTO t (note) VALUES ("it\\'s; fine")
    """

    statements = list(_iter_sql_statements(_strip_create_db_and_use(sql)))

    assert statements == [
        "INSERT INTO t (note) VALUES ('a;b')",
        "INSERT INTO t (note) VALUES (\"it\\'s; fine\")",
    ]


def test_seed_demo_attendance_writes_weekdays_only(employees, attendance):
    written = seed_demo_attendance(employees, attendance, today=date(2025, 3, 9), days=14)

    entries = attendance.list_range(start=date(2025, 2, 24), end=date(2025, 3, 9))
    assert written == len(entries) == 10
    assert all(e.work_date.weekday() < 5 for e in entries)
    assert all(e.metadata.source == EntrySource.SYSTEM for e in entries)
    assert all(e.financials.final_day_earning >= 0 for e in entries)


def test_seed_is_deterministic(employees, attendance):
    seed_demo_attendance(employees, attendance, today=date(2025, 3, 9), days=14, seed=7)
    first = {e.work_date: (e.in_time, e.out_time) for e in attendance.list_range(start=date(2025, 2, 24), end=date(2025, 3, 9))}

    seed_demo_attendance(employees, attendance, today=date(2025, 3, 9), days=14, seed=7)
    second = {e.work_date: (e.in_time, e.out_time) for e in attendance.list_range(start=date(2025, 2, 24), end=date(2025, 3, 9))}

    assert first == second


def test_seed_leaves_locked_entries_alone(employees, attendance, reconciler, employee):
    edit = ManualEdit.from_payload({"empId": 1, "date": "2025-03-05", "inTime": "07:00", "outTime": "15:00"})
    reconciler.save_manual(edit, employee, actor_id=1)

    written = seed_demo_attendance(employees, attendance, today=date(2025, 3, 9), days=14)

    assert written == 9
    locked = attendance.get_for_employee_and_date(1, date(2025, 3, 5))
    assert locked.ownership == Ownership.HUMAN_LOCKED
    assert locked.in_time == "07:00"


class _RecordingCursor:
    def __init__(self, log):
        self._log = log

    def execute(self, sql):
        self._log.append(sql)


class _RecordingConnection:
    def __init__(self, log):
        self._log = log
        self.committed = False

    def cursor(self):
        return _RecordingCursor(self._log)

    def commit(self):
        self.committed = True

    def close(self):
        pass


def test_ensure_database_exists_connects_without_database(monkeypatch):
    calls = []
    statements = []

    def fake_connect(**kwargs):
        calls.append(kwargs)
        return _RecordingConnection(statements)

    monkeypatch.setattr(mysql.connector, "connect", fake_connect)

    ensure_database_exists({"host": "db", "port": "3307", "user": "ledger", "password": "pw", "database": "ledger_test"})

    assert len(calls) == 1
    assert "database" not in calls[0]
    assert calls[0]["port"] == 3307
    assert calls[0]["use_pure"] is True
    assert statements == [
        "CREATE DATABASE IF NOT EXISTS `ledger_test` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
    ]

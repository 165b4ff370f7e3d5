from __future__ import annotations

from datetime import date

import pytest

from src.payroll_ledger.payroll_ledger.attendance.import_service import (
    CsvImportService,
    ImportStatus,
    validate_upload,
)
from src.payroll_ledger.payroll_ledger.attendance.inputs import ManualEdit
from src.payroll_ledger.payroll_ledger.core.enums import AttendanceStatus, PairingMode
from src.payroll_ledger.payroll_ledger.core.exceptions import ValidationError
from tests.fakes import make_employee


@pytest.fixture
def service(employees, reconciler):
    employees.add(make_employee(2, "EMP002", first_name="Ravi", last_name="Kumar", shift=("22:00", "06:00")))
    return CsvImportService(employees, reconciler, batch_id_factory=lambda: "batch-1")


CSV = "\n".join(
    [
        "EMP001|Asha|Perera|05/03/2025|09:05|0",
        "EMP001|Asha|Perera|05/03/2025|18:00|1",
        "EMP002|Ravi|Kumar|05/03/2025|22:10|0",
        "EMP002|Ravi|Kumar|05/03/2025|05:45|1",
        "EMP009|Ghost|User|05/03/2025|09:00|0",
        "EMP001|Asha|Perera|32/03/2025|09:00|0",
    ]
)


def test_import_summary_counts(service, attendance):
    report = service.import_csv(CSV, filename="punches.csv", size=len(CSV))

    assert report.status == ImportStatus.COMPLETE
    assert report.success is True
    assert report.batch_id == "batch-1"
    assert report.summary.to_dict() == {
        "total": 5,
        "success": 4,
        "failed": 1,
        "skipped": 1,
        "recordsCreated": 2,
        "recordsUpdated": 0,
    }

    asha = attendance.get_for_employee_and_date(1, date(2025, 3, 5))
    assert asha.status == AttendanceStatus.LATE
    ravi = attendance.get_for_employee_and_date(2, date(2025, 3, 5))
    assert ravi.out_next_day is True
    assert ravi.metadata.csv_import_batch == "batch-1"

    kinds = [line["type"] for line in report.log]
    assert kinds[-1] == "SUMMARY"
    assert "WARN" in kinds
    assert any("Employee #EMP009 not found" in line["message"] for line in report.log)


def test_reimport_updates_and_respects_manual_lock(service, reconciler, employee, attendance):
    edit = ManualEdit.from_payload({"empId": 1, "date": "2025-03-05", "inTime": "08:30", "outTime": "17:30"})
    reconciler.save_manual(edit, employee, actor_id=1)

    report = service.import_csv(CSV, filename="punches.csv", size=len(CSV))

    assert report.summary.skipped == 3
    assert report.summary.records_created == 1
    assert attendance.get_for_employee_and_date(1, date(2025, 3, 5)).in_time == "08:30"

    again = service.import_csv(CSV, filename="punches.csv", size=len(CSV))
    assert again.summary.records_updated == 1
    assert again.summary.records_created == 0


def test_empty_import(service):
    report = service.import_csv("Employee|First|Last|Date|Time|Flag\n", filename="x.csv", size=10)

    assert report.status == ImportStatus.EMPTY
    assert report.success is False
    assert report.message == "No valid rows found in CSV file"


def test_fatal_error_is_reported(service):
    report = service.import_csv(None, filename="x.csv", size=0)

    assert report.status == ImportStatus.FAILED
    assert report.error
    assert "error" not in report.to_dict()
    assert "error" in report.to_dict(include_error=True)


def test_typed_pairing_mode(employees, reconciler, attendance):
    service = CsvImportService(employees, reconciler, pairing_mode=PairingMode.TYPED)
    content = "\n".join(
        [
            "EMP001|Asha|Perera|05/03/2025|09:00|0",
            "EMP001|Asha|Perera|05/03/2025|12:00|1",
            "EMP001|Asha|Perera|05/03/2025|13:00|0",
            "EMP001|Asha|Perera|05/03/2025|18:00|1",
        ]
    )

    service.import_csv(content, filename="x.csv", size=len(content))

    entry = attendance.get_for_employee_and_date(1, date(2025, 3, 5))
    assert (entry.in_time, entry.out_time) == ("09:00", "18:00")


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"filename": None, "mimetype": None, "size": None}, "No CSV file provided"),
        ({"filename": "photo.png", "mimetype": "image/png", "size": 10}, "Invalid file type"),
        ({"filename": "big.csv", "mimetype": "text/csv", "size": 6 * 1024 * 1024}, "File size exceeds 5MB limit"),
        ({"filename": "empty.csv", "mimetype": "text/csv", "size": 0}, "CSV file is empty"),
    ],
)
def test_validate_upload_rejects(kwargs, message):
    with pytest.raises(ValidationError) as exc:
        validate_upload(**kwargs)
    assert message in str(exc.value)


def test_validate_upload_accepts_csv_by_extension():
    validate_upload(filename="PUNCHES.CSV", mimetype="application/octet-stream", size=100)

from __future__ import annotations

from datetime import date

import pytest

from src.payroll_ledger.payroll_ledger.attendance.pairing import PunchPair
from src.payroll_ledger.payroll_ledger.core.enums import Rating
from src.payroll_ledger.payroll_ledger.core.exceptions import NotFoundError, ValidationError
from src.payroll_ledger.payroll_ledger.payroll.performance_service import PerformanceService, rating_distribution
from tests.fakes import InMemoryPerformanceRecords, make_employee


@pytest.fixture
def records():
    return InMemoryPerformanceRecords()


@pytest.fixture
def service(attendance, employees, records):
    return PerformanceService(attendance, employees, records)


@pytest.fixture
def week(reconciler, employees, employee):
    ravi = make_employee(2, "EMP002", first_name="Ravi", last_name="Kumar", department="Ops")
    employees.add(ravi)
    for day in range(3, 8):
        reconciler.record_csv_day(employee, date(2025, 3, day), PunchPair("09:00", "18:00"))
    reconciler.record_csv_day(ravi, date(2025, 3, 3), PunchPair("09:40", "18:00"))
    return employee, ravi


def test_calculate_and_summary(service, records, week):
    result = service.calculate("2025-03-03", "2025-03-07", actor_id=1)
    assert (result["created"], result["updated"], result["skipped"]) == (2, 0, 0)

    summary = service.summary("2025-03-03", "2025-03-07")

    scores = {row["empNumber"]: row["performanceScore"] for row in summary["table"]}
    # Asha: 100*0.5 + 100*0.3 + 0 ; Ravi: 20*0.5 + 0*0.3 + 0
    assert scores == {"EMP001": 80, "EMP002": 10}
    assert summary["stats"]["totalEmployees"] == 2
    assert summary["stats"]["avgScore"] == 45
    assert summary["stats"]["good"] == 1
    assert summary["stats"]["poor"] == 1
    assert [d["department"] for d in summary["deptData"]] == ["Engineering", "Ops"]


def test_summary_falls_back_to_live_figures(service, week):
    summary = service.summary("2025-03-03", "2025-03-07", department="Ops")
    assert [row["empNumber"] for row in summary["table"]] == ["EMP002"]
    assert summary["table"][0]["id"] is None


def test_override_score_survives_recalculation(service, records, week):
    service.calculate("2025-03-03", "2025-03-07", actor_id=1)
    record = records.get_for_period(2, date(2025, 3, 3), date(2025, 3, 7))

    updated = service.override_score(record.record_id, 91.6, notes="Covered nights")
    assert updated.performance_score == 92
    assert updated.rating == Rating.EXCELLENT
    assert updated.score_override is True

    again = service.calculate("2025-03-03", "2025-03-07", actor_id=1)
    assert again["skipped"] == 1
    assert records.get_for_period(2, date(2025, 3, 3), date(2025, 3, 7)).performance_score == 92


@pytest.mark.parametrize("score", [None, "abc", -1, 101])
def test_override_score_rejects_bad_values(service, score):
    with pytest.raises(ValidationError):
        service.override_score(1, score)


def test_override_unknown_record(service):
    with pytest.raises(NotFoundError):
        service.override_score(999, 50)


def test_detail_with_trend(service, records, week):
    service.calculate("2025-03-03", "2025-03-07", actor_id=1)
    service.calculate("2025-03-10", "2025-03-14", actor_id=1)

    detail = service.detail(1, "2025-03-03", "2025-03-07")

    assert detail["employee"]["empNumber"] == "EMP001"
    assert detail["performance"]["performanceScore"] == 80
    assert [t["periodStart"] for t in detail["trendData"]] == ["03/03/2025", "10/03/2025"]

    with pytest.raises(NotFoundError):
        service.detail(77, "2025-03-03", "2025-03-07")


def test_rating_distribution_percentages():
    assert rating_distribution([]) == [
        {"rating": "Excellent", "count": 0, "percentage": 0},
        {"rating": "Good", "count": 0, "percentage": 0},
        {"rating": "Average", "count": 0, "percentage": 0},
        {"rating": "Poor", "count": 0, "percentage": 0},
    ]

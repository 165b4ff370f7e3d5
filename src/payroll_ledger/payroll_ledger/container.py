from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.import_service import CsvImportService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.reconciler import AttendanceReconciler
from .attendance.service import AttendanceService
from .attendance.worksheet import WorksheetBuilder
from .core.policy import PayPolicy, ScoringPolicy
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .payroll.aggregation import AggregationEngine
from .payroll.calculator.factory import PayCaseFactory
from .payroll.calculator.financial_calculator import FinancialCalculator
from .payroll.mysql_summary_repository import MySQLPayrollRecordRepository, MySQLPerformanceRecordRepository
from .payroll.performance_service import PerformanceService
from .payroll.service import PayrollService
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.service import RequestService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: object
    attendance_repo: object
    payroll_records_repo: object
    performance_records_repo: object
    requests_repo: object

    calculator: FinancialCalculator
    reconciler: AttendanceReconciler
    csv_import_service: CsvImportService
    attendance_service: AttendanceService
    payroll_service: PayrollService
    performance_service: PerformanceService
    request_service: RequestService


def wire_container(
    *,
    conn: Optional[DatabaseConnection],
    employees_repo,
    attendance_repo,
    payroll_records_repo,
    performance_records_repo,
    requests_repo,
    pay_policy: Optional[PayPolicy] = None,
    scoring_policy: Optional[ScoringPolicy] = None,
) -> Container:
    """Compose services over any repository implementations (MySQL or in-memory)."""

    pay_policy = pay_policy or PayPolicy()
    engine = AggregationEngine(policy=scoring_policy or ScoringPolicy())

    calculator = FinancialCalculator(factory=PayCaseFactory(partial_factor=pay_policy.partial_punch_factor))
    reconciler = AttendanceReconciler(attendance_repo, calculator=calculator)
    csv_import_service = CsvImportService(
        employees_repo,
        reconciler,
        pairing_mode=pay_policy.pairing_mode,
        window_hours=pay_policy.punch_window_hours,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        reconciler,
        worksheet=WorksheetBuilder(employees_repo, attendance_repo),
    )
    payroll_service = PayrollService(attendance_repo, employees_repo, payroll_records_repo, engine=engine)
    performance_service = PerformanceService(attendance_repo, employees_repo, performance_records_repo, engine=engine)
    request_service = RequestService(requests_repo, attendance_repo, employees_repo, reconciler)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        payroll_records_repo=payroll_records_repo,
        performance_records_repo=performance_records_repo,
        requests_repo=requests_repo,
        calculator=calculator,
        reconciler=reconciler,
        csv_import_service=csv_import_service,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
        performance_service=performance_service,
        request_service=request_service,
    )


def build_container(
    *,
    db_config: dict,
    pay_policy: Optional[PayPolicy] = None,
    scoring_policy: Optional[ScoringPolicy] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        conn=conn,
        employees_repo=MySQLEmployeeDirectory(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        payroll_records_repo=MySQLPayrollRecordRepository(conn),
        performance_records_repo=MySQLPerformanceRecordRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        pay_policy=pay_policy,
        scoring_policy=scoring_policy,
    )

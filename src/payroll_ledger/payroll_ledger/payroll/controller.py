from __future__ import annotations

from flask import Flask, Response, request

from ..common.web import admin_required, current_actor, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    # Payroll

    @app.route("/api/payroll/calculate", methods=["POST"], endpoint="payroll_calculate")
    @admin_required
    def payroll_calculate():
        data = json_body()
        result = container.payroll_service.calculate(
            data.get("startDate"),
            data.get("endDate"),
            actor_id=current_actor().user_id,
        )
        return ok(result.to_dict())

    @app.route("/api/payroll/summary", methods=["GET"], endpoint="payroll_summary")
    @admin_required
    def payroll_summary():
        report = container.payroll_service.salary_summary(
            request.args.get("fromDate"),
            request.args.get("toDate"),
            department=request.args.get("department") or None,
        )
        return ok({"summary": report.rows, "totals": report.totals})

    @app.route("/api/payroll/employee/<int:employee_id>", methods=["GET"], endpoint="payroll_employee")
    @login_required
    def payroll_employee(employee_id: int):
        data = container.payroll_service.employee_breakdown(
            employee_id,
            request.args.get("fromDate"),
            request.args.get("toDate"),
            actor=current_actor(),
        )
        return ok(data)

    @app.route("/api/payroll/live", methods=["GET"], endpoint="payroll_live")
    @admin_required
    def payroll_live():
        return ok(container.payroll_service.live_payroll())

    @app.route("/api/payroll/export", methods=["POST"], endpoint="payroll_export")
    @admin_required
    def payroll_export():
        data = json_body()
        body = container.payroll_service.export(data.get("fromDate"), data.get("toDate"), fmt=data.get("format"))
        return Response(
            body,
            mimetype="text/csv",
            headers={"Content-Disposition": 'attachment; filename="payroll.csv"'},
        )

    @app.route("/api/payroll/<int:record_id>/status", methods=["PATCH"], endpoint="payroll_set_status")
    @admin_required
    def payroll_set_status(record_id: int):
        data = json_body()
        record = container.payroll_service.set_status(
            record_id,
            data.get("status"),
            actor_id=current_actor().user_id,
            notes=data.get("notes"),
        )
        return ok({"message": "Payroll status updated", "record": record.to_dict(include_breakdown=True)})

    # Performance

    @app.route("/api/performance/calculate", methods=["POST"], endpoint="performance_calculate")
    @admin_required
    def performance_calculate():
        data = json_body()
        result = container.performance_service.calculate(
            data.get("startDate"),
            data.get("endDate"),
            actor_id=current_actor().user_id,
        )
        return ok(result)

    @app.route("/api/performance/summary", methods=["GET"], endpoint="performance_summary")
    @admin_required
    def performance_summary():
        data = container.performance_service.summary(
            request.args.get("startDate"),
            request.args.get("endDate"),
            department=request.args.get("department") or None,
        )
        return ok(data)

    @app.route("/api/performance/<int:employee_id>", methods=["GET"], endpoint="performance_detail")
    @admin_required
    def performance_detail(employee_id: int):
        data = container.performance_service.detail(
            employee_id,
            request.args.get("startDate"),
            request.args.get("endDate"),
        )
        return ok(data)

    @app.route("/api/performance/<int:record_id>/score", methods=["PATCH"], endpoint="performance_override_score")
    @admin_required
    def performance_override_score(record_id: int):
        data = json_body()
        record = container.performance_service.override_score(record_id, data.get("score"), notes=data.get("notes"))
        return ok({"message": "Performance score updated", "record": record.to_dict()})

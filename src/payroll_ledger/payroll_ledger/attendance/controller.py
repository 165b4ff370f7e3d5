from __future__ import annotations

import logging

from flask import Flask, current_app, jsonify, request

from ..common.datetime_utils import format_datetime, now_local
from ..common.web import admin_required, current_actor, json_body, ok
from ..container import Container
from ..core.constants import MAX_CSV_BYTES
from ..core.exceptions import ValidationError
from .import_service import ImportStatus, validate_upload
from .reconciler import WriteOutcome

logger = logging.getLogger(__name__)

_IMPORT_HTTP_STATUS = {
    ImportStatus.COMPLETE: 200,
    ImportStatus.EMPTY: 400,
    ImportStatus.FAILED: 500,
}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/import-csv", methods=["POST"], endpoint="attendance_import_csv")
    @admin_required
    def import_csv():
        upload = request.files.get("csvFile")
        if upload is None:
            raise ValidationError("No CSV file provided")

        raw = upload.read()
        logger.info("CSV upload %s (%s bytes) by user %s", upload.filename, len(raw), current_actor().user_id)
        validate_upload(
            filename=upload.filename,
            mimetype=upload.mimetype,
            size=len(raw),
            max_bytes=int(current_app.config.get("MAX_CSV_BYTES", MAX_CSV_BYTES)),
        )
        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ValidationError("CSV file must be UTF-8 text") from None

        report = container.csv_import_service.import_csv(
            content,
            filename=upload.filename,
            size=len(raw),
            actor_id=current_actor().user_id,
        )
        body = report.to_dict(include_error=bool(current_app.debug))
        return jsonify(body), _IMPORT_HTTP_STATUS[report.status]

    @app.route("/api/attendance/range", methods=["GET"], endpoint="attendance_range")
    @admin_required
    def attendance_range():
        entries = container.attendance_service.list_range(request.args.get("fromDate"), request.args.get("toDate"))
        return ok({"attendance": [e.to_dict() for e in entries], "total": len(entries)})

    @app.route("/api/attendance/worksheet", methods=["POST"], endpoint="attendance_worksheet")
    @admin_required
    def worksheet():
        data = json_body()
        rows = container.attendance_service.build_worksheet(
            data.get("fromDate"),
            data.get("toDate"),
            department=data.get("department") or None,
        )
        return ok({"worksheet": [r.to_dict() for r in rows], "total": len(rows)})

    @app.route("/api/attendance/overview", methods=["POST"], endpoint="attendance_overview")
    @admin_required
    def overview():
        data = json_body()
        result = container.attendance_service.overview(
            data.get("fromDate"),
            data.get("toDate"),
            filter_type=data.get("filterType") or None,
        )
        return ok(result)

    @app.route("/api/attendance/save-row", methods=["POST"], endpoint="attendance_save_row")
    @admin_required
    def save_row():
        result = container.attendance_service.save_row(json_body(), actor_id=current_actor().user_id)
        return ok(
            {
                "message": "Attendance saved",
                "record": result.entry.to_dict(),
                "created": result.outcome == WriteOutcome.CREATED,
                "lastModified": format_datetime(now_local()),
            }
        )

    @app.route("/api/attendance/save-batch", methods=["POST"], endpoint="attendance_save_batch")
    @admin_required
    def save_batch():
        data = json_body()
        result = container.attendance_service.save_batch(data.get("rows"), actor_id=current_actor().user_id)
        return ok(
            {
                "message": f"Saved {result.saved} row(s), {result.failed} failed",
                "saved": result.saved,
                "created": result.created,
                "updated": result.updated,
                "failed": result.failed,
                "errors": result.errors,
            }
        )

    @app.route("/api/attendance/entry", methods=["DELETE"], endpoint="attendance_delete_entry")
    @admin_required
    def delete_entry():
        data = json_body()
        container.attendance_service.delete_entry(data.get("empId"), data.get("date"))
        return ok({"message": "Attendance entry deleted"})

from __future__ import annotations

from flask import Flask

from ..common.web import admin_required, current_actor, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/requests/leave", methods=["POST"], endpoint="request_leave_submit")
    @login_required
    def submit_leave():
        req = container.request_service.submit_leave(current_actor(), json_body())
        return ok({"message": "Leave request submitted", "request": req.to_dict()}, 201)

    @app.route("/api/requests/correction", methods=["POST"], endpoint="request_correction_submit")
    @login_required
    def submit_correction():
        req = container.request_service.submit_correction(current_actor(), json_body())
        return ok({"message": "Correction request submitted", "request": req.to_dict()}, 201)

    @app.route("/api/requests/pending", methods=["GET"], endpoint="requests_pending")
    @admin_required
    def pending():
        return ok(container.request_service.list_pending(current_actor()))

    @app.route("/api/requests/mine", methods=["GET"], endpoint="requests_mine")
    @login_required
    def mine():
        return ok(container.request_service.list_mine(current_actor()))

    @app.route("/api/requests/leave/<int:request_id>/approve", methods=["PATCH"], endpoint="request_leave_approve")
    @admin_required
    def approve_leave(request_id: int):
        return ok(container.request_service.approve_leave(current_actor(), request_id))

    @app.route("/api/requests/leave/<int:request_id>/reject", methods=["PATCH"], endpoint="request_leave_reject")
    @admin_required
    def reject_leave(request_id: int):
        data = json_body()
        container.request_service.reject_leave(current_actor(), request_id, data.get("reason"))
        return ok({"message": "Leave rejected"})

    @app.route(
        "/api/requests/correction/<int:request_id>/approve",
        methods=["PATCH"],
        endpoint="request_correction_approve",
    )
    @admin_required
    def approve_correction(request_id: int):
        return ok(container.request_service.approve_correction(current_actor(), request_id))

    @app.route(
        "/api/requests/correction/<int:request_id>/reject",
        methods=["PATCH"],
        endpoint="request_correction_reject",
    )
    @admin_required
    def reject_correction(request_id: int):
        data = json_body()
        container.request_service.reject_correction(current_actor(), request_id, data.get("reason"))
        return ok({"message": "Correction rejected"})

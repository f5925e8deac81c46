from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date, parse_optional_datetime
from ..common.http import json_body, ok
from ..common.validators import parse_optional_int
from ..container import Container
from ..users.guard import admin_required, current_identity, make_token_required


def _date_range_args():
    return (
        parse_optional_date(request.args.get("start_date"), "start_date"),
        parse_optional_date(request.args.get("end_date"), "end_date"),
    )


def _page_args():
    return (
        parse_optional_int(request.args.get("page"), "page"),
        parse_optional_int(request.args.get("limit"), "limit"),
    )


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @token_required
    def clock_in():
        result = container.session_tracker.clock_in(current_identity().user_id, json_body().get("notes"))
        return ok("Successfully clocked in!", result.as_dict(), 201)

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @token_required
    def clock_out():
        result = container.session_tracker.clock_out(current_identity().user_id, json_body().get("notes"))
        return ok("Successfully clocked out!", result.as_dict())

    @app.route("/api/attendance/status", methods=["GET"], endpoint="attendance_status")
    @token_required
    def attendance_status():
        status = container.session_tracker.current_status(current_identity().user_id)
        message = "Active attendance found" if status.is_active else "No active attendance for today"
        return ok(message, status.as_dict())

    @app.route("/api/attendance/my-attendance", methods=["GET"], endpoint="my_attendance")
    @token_required
    def my_attendance():
        start_date, end_date = _date_range_args()
        page, limit = _page_args()
        data = container.report_aggregator.user_attendance(
            current_identity().user_id,
            start_date=start_date,
            end_date=end_date,
            page=page,
            page_size=limit,
        )
        return ok("Attendance history retrieved successfully", data.as_dict())

    @app.route("/api/attendance/all-users", methods=["GET"], endpoint="all_users_attendance")
    @token_required
    @admin_required
    def all_users_attendance():
        start_date, end_date = _date_range_args()
        page, limit = _page_args()
        data = container.report_aggregator.all_users_attendance(
            current_identity().role,
            start_date=start_date,
            end_date=end_date,
            user_id=parse_optional_int(request.args.get("user_id"), "user_id"),
            page=page,
            page_size=limit,
        )
        return ok("All users attendance retrieved successfully", data.as_dict())

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    @token_required
    @admin_required
    def attendance_report():
        start_date, end_date = _date_range_args()
        report = container.report_aggregator.generate_report(
            current_identity().role,
            start_date=start_date,
            end_date=end_date,
            user_id=parse_optional_int(request.args.get("user_id"), "user_id"),
        )
        return ok("Attendance report generated successfully", report.as_dict())

    @app.route("/api/attendance/update/<int:attendance_id>", methods=["PUT"], endpoint="update_attendance")
    @token_required
    @admin_required
    def update_attendance(attendance_id: int):
        body = json_body()
        record = container.report_aggregator.update_record(
            current_identity().role,
            attendance_id,
            clock_in_time=parse_optional_datetime(body.get("clock_in_time"), "clock_in_time"),
            clock_out_time=parse_optional_datetime(body.get("clock_out_time"), "clock_out_time"),
            notes=body.get("notes"),
            status=body.get("status"),
        )
        return ok("Attendance record updated successfully", record.as_dict())

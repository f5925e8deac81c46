from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceCriteria, AttendanceRecord, AttendanceSort
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.hours import round_hours
from ..common.pagination import PageRequest, total_pages
from ..common.validators import blank_to_none
from ..core.constants import DEFAULT_ALL_PAGE_SIZE, DEFAULT_MY_PAGE_SIZE
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ConflictError, DuplicateKeyError, NotFoundError, ValidationError
from ..core.policy import require_admin
from .model import AttendancePage, AttendanceReport, ReportStatistics

logger = logging.getLogger(__name__)


class ReportAggregator:
    """History views, cross-user summaries and administrative corrections."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def _page(self, criteria: AttendanceCriteria, *, sort: AttendanceSort, request: PageRequest) -> AttendancePage:
        rows = self._attendance.search(criteria, sort=sort, limit=request.limit, offset=request.offset)
        total = self._attendance.count(criteria)
        return AttendancePage(
            items=list(rows),
            current_page=request.page,
            total_pages=total_pages(total, request.page_size),
            total_records=total,
            records_per_page=request.page_size,
        )

    def user_attendance(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> AttendancePage:
        return self._page(
            AttendanceCriteria(user_id=int(user_id), start_date=start_date, end_date=end_date),
            sort=AttendanceSort.NEWEST_FIRST,
            request=PageRequest.build(page, page_size, default_size=DEFAULT_MY_PAGE_SIZE),
        )

    def all_users_attendance(
        self,
        current_role: Role,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[int] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> AttendancePage:
        require_admin(current_role)
        return self._page(
            AttendanceCriteria(user_id=user_id, start_date=start_date, end_date=end_date),
            sort=AttendanceSort.NEWEST_FIRST_BY_NAME,
            request=PageRequest.build(page, page_size, default_size=DEFAULT_ALL_PAGE_SIZE),
        )

    def generate_report(
        self,
        current_role: Role,
        *,
        start_date: Optional[date],
        end_date: Optional[date],
        user_id: Optional[int] = None,
    ) -> AttendanceReport:
        require_admin(current_role)

        if start_date is None or end_date is None:
            raise ValidationError("Start date and end date are required for report generation")
        if start_date > end_date:
            raise ValidationError("Start date must not be after end date")

        rows = list(self._attendance.summarize_by_user(start_date=start_date, end_date=end_date, user_id=user_id))

        total_users = len(rows)
        total_hours = sum((round_hours(r.total_hours_worked) for r in rows), Decimal("0"))
        average = round_hours(total_hours / total_users) if total_users else Decimal("0.00")

        most_active = None
        for r in rows:
            # strict comparison keeps the first row on ties
            if most_active is None or r.total_hours_worked > most_active.total_hours_worked:
                most_active = r

        logger.info("Report generated for %s..%s (%d users)", start_date, end_date, total_users)
        return AttendanceReport(
            rows=rows,
            statistics=ReportStatistics(
                total_users=total_users,
                total_hours_all_users=total_hours,
                average_hours_per_user=average,
                most_active_user=most_active,
                start_date=start_date,
                end_date=end_date,
            ),
        )

    def update_record(
        self,
        current_role: Role,
        attendance_id: int,
        *,
        clock_in_time: Optional[datetime] = None,
        clock_out_time: Optional[datetime] = None,
        notes: Optional[str] = None,
        status: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Admin override. total_hours is left as stored."""

        require_admin(current_role)

        existing = self._attendance.get_by_id(int(attendance_id))
        if not existing:
            raise NotFoundError("Attendance record not found")

        new_status: Optional[AttendanceStatus] = None
        if blank_to_none(status) is not None:
            try:
                new_status = AttendanceStatus(str(status).strip().lower())
            except ValueError:
                raise ValidationError("Invalid status") from None

        effective_in = clock_in_time or existing.clock_in_time
        effective_out = clock_out_time or existing.clock_out_time
        if effective_out is not None and effective_out < effective_in:
            raise ValidationError("Clock-out time cannot be earlier than clock-in time")

        try:
            updated = self._attendance.admin_update_record(
                attendance_id=existing.attendance_id,
                clock_in_time=clock_in_time,
                clock_out_time=clock_out_time,
                notes=blank_to_none(notes),
                status=new_status,
                updated_at=now or now_local(),
            )
        except DuplicateKeyError:
            raise ConflictError("Another active session already exists for this user and date") from None
        if not updated:
            raise NotFoundError("Attendance record not found")

        logger.info("Attendance record %s updated by admin", existing.attendance_id)
        return updated

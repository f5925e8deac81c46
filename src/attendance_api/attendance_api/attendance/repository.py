from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceCriteria, AttendanceRecord, AttendanceRow, AttendanceSort, UserSummaryRow


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_active(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_active_row(self, user_id: int, work_date: date) -> Optional[AttendanceRow]:
        """Active record joined with the owner's name and email."""

        raise NotImplementedError

    def create_clock_in(
        self,
        *,
        user_id: int,
        work_date: date,
        clock_in_time: datetime,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Insert an active record.

        Raises DuplicateKeyError when (user, work_date) already has an active record.
        """

        raise NotImplementedError

    def close_session(
        self,
        *,
        attendance_id: int,
        clock_out_time: datetime,
        total_hours: Decimal,
        notes: Optional[str],
        updated_at: datetime,
    ) -> Optional[AttendanceRecord]:
        """Close an active record; None if it is no longer active.

        `notes` replaces the stored notes only when not None.
        """

        raise NotImplementedError

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        clock_in_time: Optional[datetime] = None,
        clock_out_time: Optional[datetime] = None,
        notes: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        updated_at: datetime,
    ) -> Optional[AttendanceRecord]:
        """Admin-only partial override. None keeps the stored value."""

        raise NotImplementedError

    def search(
        self,
        criteria: AttendanceCriteria,
        *,
        sort: AttendanceSort,
        limit: int,
        offset: int,
    ) -> Sequence[AttendanceRow]:
        raise NotImplementedError

    def count(self, criteria: AttendanceCriteria) -> int:
        raise NotImplementedError

    def summarize_by_user(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[int] = None,
    ) -> Sequence[UserSummaryRow]:
        """One row per user (left join), ordered by name."""

        raise NotImplementedError

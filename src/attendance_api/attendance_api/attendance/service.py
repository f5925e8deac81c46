from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.hours import hours_between
from ..common.validators import blank_to_none
from ..core.exceptions import ConflictError, DuplicateKeyError, NotFoundError
from ..users.model import UserProfile
from ..users.repository import UserRepository
from .model import AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockInResult:
    attendance: AttendanceRecord
    user: UserProfile

    def as_dict(self) -> dict:
        return {"attendance": self.attendance.as_dict(), "user": self.user.as_dict(include_role=False)}


@dataclass(frozen=True)
class ClockOutResult:
    attendance: AttendanceRecord
    total_hours: Decimal

    def as_dict(self) -> dict:
        return {"attendance": self.attendance.as_dict(), "total_hours": float(self.total_hours)}


@dataclass(frozen=True)
class SessionStatus:
    is_active: bool
    attendance: Optional[AttendanceRow] = None
    current_hours_worked: Optional[Decimal] = None

    def as_dict(self) -> dict:
        out = {
            "is_active": self.is_active,
            "attendance": self.attendance.as_dict() if self.attendance else None,
        }
        if self.current_hours_worked is not None:
            out["current_hours_worked"] = float(self.current_hours_worked)
        return out


class SessionTracker:
    """Clock-in/clock-out lifecycle, one active session per user per work date."""

    def __init__(self, attendance: AttendanceRepository, users: UserRepository):
        self._attendance = attendance
        self._users = users

    def clock_in(self, user_id: int, notes: Optional[str] = None, *, now: Optional[datetime] = None) -> ClockInResult:
        now = now or now_local()
        today = now.date()

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        existing = self._attendance.get_active(user_id, today)
        if existing:
            raise ConflictError("You have already clocked in today. Please clock out first.", data=existing)

        try:
            record = self._attendance.create_clock_in(
                user_id=user_id,
                work_date=today,
                clock_in_time=now,
                notes=blank_to_none(notes),
            )
        except DuplicateKeyError:
            # Lost the race against a concurrent clock-in; the unique key kept the invariant.
            winner = self._attendance.get_active(user_id, today)
            raise ConflictError("You have already clocked in today. Please clock out first.", data=winner) from None

        logger.info("User %s clocked in (record %s, work date %s)", user_id, record.attendance_id, today)
        return ClockInResult(attendance=record, user=user.profile())

    def clock_out(self, user_id: int, notes: Optional[str] = None, *, now: Optional[datetime] = None) -> ClockOutResult:
        now = now or now_local()
        today = now.date()

        record = self._attendance.get_active(user_id, today)
        if not record:
            raise NotFoundError("No active clock-in found for today. Please clock in first.")

        clock_out_time = max(now, record.clock_in_time)
        total_hours = hours_between(record.clock_in_time, clock_out_time)

        updated = self._attendance.close_session(
            attendance_id=record.attendance_id,
            clock_out_time=clock_out_time,
            total_hours=total_hours,
            notes=blank_to_none(notes),
            updated_at=now,
        )
        if not updated:
            raise NotFoundError("No active clock-in found for today. Please clock in first.")

        logger.info("User %s clocked out (record %s, %s h)", user_id, record.attendance_id, total_hours)
        return ClockOutResult(attendance=updated, total_hours=total_hours)

    def current_status(self, user_id: int, *, now: Optional[datetime] = None) -> SessionStatus:
        now = now or now_local()

        row = self._attendance.get_active_row(user_id, now.date())
        if not row:
            return SessionStatus(is_active=False)

        return SessionStatus(
            is_active=True,
            attendance=row,
            current_hours_worked=hours_between(row.record.clock_in_time, now),
        )

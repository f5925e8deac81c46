from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import AttendanceStatus, Role


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one clock-in/clock-out session."""

    attendance_id: int
    user_id: int
    work_date: date
    clock_in_time: datetime
    clock_out_time: Optional[datetime]
    status: AttendanceStatus
    notes: Optional[str] = None
    total_hours: Optional[Decimal] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == AttendanceStatus.ACTIVE

    def as_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "user_id": self.user_id,
            "work_date": self.work_date.isoformat(),
            "clock_in_time": isoformat_or_none(self.clock_in_time),
            "clock_out_time": isoformat_or_none(self.clock_out_time),
            "notes": self.notes,
            "status": self.status.value,
            "total_hours": float(self.total_hours) if self.total_hours is not None else None,
            "updated_at": isoformat_or_none(self.updated_at),
        }


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model: a record joined with its owner's public details."""

    record: AttendanceRecord
    name: str
    email: str
    role: Optional[Role] = None

    def as_dict(self) -> dict:
        out = self.record.as_dict()
        out["name"] = self.name
        out["email"] = self.email
        if self.role is not None:
            out["role"] = self.role.value
        return out


@dataclass(frozen=True)
class AttendanceCriteria:
    """Filters for history queries. None means "no constraint"."""

    user_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class AttendanceSort(str, Enum):
    # work_date DESC, clock_in_time DESC
    NEWEST_FIRST = "newest_first"
    # work_date DESC, user name ASC, clock_in_time DESC
    NEWEST_FIRST_BY_NAME = "newest_first_by_name"


@dataclass(frozen=True)
class UserSummaryRow:
    """Read-model: per-user aggregate over a report range."""

    user_id: int
    name: str
    email: str
    role: Role
    total_days_worked: int
    total_hours_worked: Decimal
    average_hours_per_day: Decimal
    incomplete_days: int

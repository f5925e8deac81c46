from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.model import AttendanceRow, UserSummaryRow
from ..common.hours import format_hours


@dataclass(frozen=True)
class AttendancePage:
    items: Sequence[AttendanceRow]
    current_page: int
    total_pages: int
    total_records: int
    records_per_page: int

    def as_dict(self) -> dict:
        return {
            "attendance": [r.as_dict() for r in self.items],
            "pagination": {
                "current_page": self.current_page,
                "total_pages": self.total_pages,
                "total_records": self.total_records,
                "records_per_page": self.records_per_page,
            },
        }


def summary_row_dict(row: UserSummaryRow) -> dict:
    return {
        "id": row.user_id,
        "name": row.name,
        "email": row.email,
        "role": row.role.value,
        "total_days_worked": row.total_days_worked,
        "total_hours_worked": format_hours(row.total_hours_worked),
        "average_hours_per_day": format_hours(row.average_hours_per_day),
        "incomplete_days": row.incomplete_days,
    }


@dataclass(frozen=True)
class ReportStatistics:
    total_users: int
    total_hours_all_users: Decimal
    average_hours_per_user: Decimal
    most_active_user: Optional[UserSummaryRow]
    start_date: date
    end_date: date

    def as_dict(self) -> dict:
        return {
            "total_users": self.total_users,
            "total_hours_all_users": format_hours(self.total_hours_all_users),
            "average_hours_per_user": format_hours(self.average_hours_per_user),
            "most_active_user": summary_row_dict(self.most_active_user) if self.most_active_user else None,
            "date_range": {
                "start_date": self.start_date.isoformat(),
                "end_date": self.end_date.isoformat(),
            },
        }


@dataclass(frozen=True)
class AttendanceReport:
    rows: Sequence[UserSummaryRow]
    statistics: ReportStatistics

    def as_dict(self) -> dict:
        return {
            "report": [summary_row_dict(r) for r in self.rows],
            "statistics": self.statistics.as_dict(),
        }

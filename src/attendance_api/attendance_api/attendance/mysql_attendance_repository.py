from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.query import QueryFilter
from ..core.enums import AttendanceStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceCriteria, AttendanceRecord, AttendanceRow, AttendanceSort, UserSummaryRow
from .repository import AttendanceRepository

_RECORD_COLUMNS = (
    "ar.attendance_id, ar.user_id, ar.work_date, ar.clock_in_time, ar.clock_out_time, "
    "ar.notes, ar.status, ar.total_hours, ar.updated_at"
)

_ORDER_BY = {
    AttendanceSort.NEWEST_FIRST: "ar.work_date DESC, ar.clock_in_time DESC",
    AttendanceSort.NEWEST_FIRST_BY_NAME: "ar.work_date DESC, u.name ASC, ar.clock_in_time DESC",
}


def _to_record(r: dict) -> AttendanceRecord:
    total_hours = r.get("total_hours")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        clock_in_time=r["clock_in_time"],
        clock_out_time=r.get("clock_out_time"),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
        total_hours=Decimal(str(total_hours)) if total_hours is not None else None,
        updated_at=r.get("updated_at"),
    )


def _to_row(r: dict) -> AttendanceRow:
    return AttendanceRow(
        record=_to_record(r),
        name=r["name"],
        email=r["email"],
        role=Role(r["role"]) if r.get("role") else None,
    )


def _criteria_filter(criteria: AttendanceCriteria) -> QueryFilter:
    return (
        QueryFilter()
        .add_if(criteria.user_id, "ar.user_id = %s")
        .add_if(criteria.start_date, "ar.work_date >= %s")
        .add_if(criteria.end_date, "ar.work_date <= %s")
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_record(self, cur, attendance_id: int) -> Optional[AttendanceRecord]:
        cur.execute(
            f"SELECT {_RECORD_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s",
            (int(attendance_id),),
        )
        r = fetchone(cur)
        return _to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_record(cur, attendance_id)

    def get_active(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records ar
                WHERE ar.user_id=%s AND ar.work_date=%s AND ar.status=%s
                """,
                (int(user_id), work_date, AttendanceStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_active_row(self, user_id: int, work_date: date) -> Optional[AttendanceRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}, u.name, u.email
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.user_id
                WHERE ar.user_id=%s AND ar.work_date=%s AND ar.status=%s
                """,
                (int(user_id), work_date, AttendanceStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _to_row(r) if r else None

    def create_clock_in(
        self,
        *,
        user_id: int,
        work_date: date,
        clock_in_time: datetime,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(user_id, work_date, clock_in_time, notes, status, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), work_date, clock_in_time, notes, AttendanceStatus.ACTIVE.value, clock_in_time),
            )
            return self._select_record(cur, int(cur.lastrowid))

    def close_session(
        self,
        *,
        attendance_id: int,
        clock_out_time: datetime,
        total_hours: Decimal,
        notes: Optional[str],
        updated_at: datetime,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_out_time=%s,
                    notes=COALESCE(%s, notes),
                    total_hours=%s,
                    status=%s,
                    updated_at=%s
                WHERE attendance_id=%s AND status=%s
                """,
                (
                    clock_out_time,
                    notes,
                    total_hours,
                    AttendanceStatus.COMPLETED.value,
                    updated_at,
                    int(attendance_id),
                    AttendanceStatus.ACTIVE.value,
                ),
            )
            if cur.rowcount == 0:
                return None
            return self._select_record(cur, attendance_id)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_in_time=COALESCE(%s, clock_in_time),
                    clock_out_time=COALESCE(%s, clock_out_time),
                    notes=COALESCE(%s, notes),
                    status=COALESCE(%s, status),
                    updated_at=%s
                WHERE attendance_id=%s
                """,
                (
                    clock_in_time,
                    clock_out_time,
                    notes,
                    status.value if status else None,
                    updated_at,
                    int(attendance_id),
                ),
            )
            return self._select_record(cur, attendance_id)

    def search(
        self,
        criteria: AttendanceCriteria,
        *,
        sort: AttendanceSort,
        limit: int,
        offset: int,
    ) -> Sequence[AttendanceRow]:
        flt = _criteria_filter(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}, u.name, u.email, u.role
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.user_id
                {flt.where()}
                ORDER BY {_ORDER_BY[sort]}
                LIMIT %s OFFSET %s
                """,
                flt.params + (int(limit), int(offset)),
            )
            return [_to_row(r) for r in fetchall(cur)]

    def count(self, criteria: AttendanceCriteria) -> int:
        flt = _criteria_filter(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.user_id
                {flt.where()}
                """,
                flt.params,
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def summarize_by_user(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[int] = None,
    ) -> Sequence[UserSummaryRow]:
        join_on = (
            QueryFilter()
            .add("ar.user_id = u.user_id")
            .add("ar.work_date >= %s", start_date)
            .add("ar.work_date <= %s", end_date)
        )
        where = QueryFilter().add_if(user_id, "u.user_id = %s")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    u.user_id, u.name, u.email, u.role,
                    COUNT(ar.attendance_id) AS total_days_worked,
                    COALESCE(SUM(ar.total_hours), 0) AS total_hours_worked,
                    COALESCE(AVG(ar.total_hours), 0) AS average_hours_per_day,
                    COUNT(CASE WHEN ar.status = %s THEN 1 END) AS incomplete_days
                FROM users u
                LEFT JOIN attendance_records ar ON {join_on.conditions()}
                {where.where()}
                GROUP BY u.user_id, u.name, u.email, u.role
                ORDER BY u.name ASC, u.user_id ASC
                """,
                (AttendanceStatus.ACTIVE.value,) + join_on.params + where.params,
            )
            return [
                UserSummaryRow(
                    user_id=int(r["user_id"]),
                    name=r["name"],
                    email=r["email"],
                    role=Role(r["role"]),
                    total_days_worked=int(r["total_days_worked"] or 0),
                    total_hours_worked=Decimal(str(r["total_hours_worked"] or 0)),
                    average_hours_per_day=Decimal(str(r["average_hours_per_day"] or 0)),
                    incomplete_days=int(r["incomplete_days"] or 0),
                )
                for r in fetchall(cur)
            ]

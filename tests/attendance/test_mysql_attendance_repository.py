from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import mysql.connector
import pytest

from src.attendance_api.attendance_api.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.attendance_api.attendance_api.core.enums import AttendanceStatus, Role
from src.attendance_api.attendance_api.core.exceptions import DuplicateKeyError


class FakeCursor:
    def __init__(self, *, rows=None, one=None, rowcount=1, error=None):
        self.executed = []
        self._rows = rows or []
        self._one = one
        self.rowcount = rowcount
        self.lastrowid = 1
        self._error = error

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), tuple(params)))
        if self._error is not None:
            raise self._error

    def fetchone(self):
        return self._one

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, cursor: FakeCursor):
        self.conn = FakeConnection(cursor)

    def connect(self):
        return self.conn


def _repo(cursor: FakeCursor):
    factory = FakeConnectionFactory(cursor)
    return MySQLAttendanceRepository(factory), factory.conn


def test_summarize_binds_status_then_range_then_user():
    cur = FakeCursor(
        rows=[
            {
                "user_id": 3,
                "name": "Bob",
                "email": "bob@example.com",
                "role": "employee",
                "total_days_worked": 2,
                "total_hours_worked": Decimal("7.50"),
                "average_hours_per_day": Decimal("3.75"),
                "incomplete_days": 1,
            }
        ]
    )
    repo, _ = _repo(cur)

    rows = repo.summarize_by_user(start_date=date(2026, 1, 1), end_date=date(2026, 1, 31), user_id=3)

    sql, params = cur.executed[0]
    assert "COUNT(CASE WHEN ar.status = %s THEN 1 END)" in sql
    assert "LEFT JOIN attendance_records ar ON ar.user_id = u.user_id AND ar.work_date >= %s AND ar.work_date <= %s" in sql
    assert "WHERE u.user_id = %s" in sql
    assert params == ("active", date(2026, 1, 1), date(2026, 1, 31), 3)

    assert len(rows) == 1
    assert rows[0].role == Role.EMPLOYEE
    assert rows[0].total_hours_worked == Decimal("7.50")
    assert rows[0].incomplete_days == 1


def test_summarize_without_user_has_no_where_clause():
    cur = FakeCursor(rows=[])
    repo, _ = _repo(cur)

    assert repo.summarize_by_user(start_date=date(2026, 1, 1), end_date=date(2026, 1, 31)) == []

    sql, params = cur.executed[0]
    assert "WHERE" not in sql
    assert params == ("active", date(2026, 1, 1), date(2026, 1, 31))


def test_close_session_skips_rows_no_longer_active():
    cur = FakeCursor(rowcount=0)
    repo, conn = _repo(cur)
    now = datetime(2026, 2, 2, 17, 0)

    result = repo.close_session(
        attendance_id=9, clock_out_time=now, total_hours=Decimal("8.00"), notes=None, updated_at=now
    )

    assert result is None
    assert len(cur.executed) == 1
    sql, params = cur.executed[0]
    assert "WHERE attendance_id=%s AND status=%s" in sql
    assert params == (now, None, Decimal("8.00"), "completed", now, 9, "active")
    assert conn.committed


def test_close_session_returns_updated_record():
    now = datetime(2026, 2, 2, 17, 0)
    cur = FakeCursor(
        rowcount=1,
        one={
            "attendance_id": 9,
            "user_id": 1,
            "work_date": date(2026, 2, 2),
            "clock_in_time": datetime(2026, 2, 2, 9, 0),
            "clock_out_time": now,
            "notes": None,
            "status": "completed",
            "total_hours": Decimal("8.00"),
            "updated_at": now,
        },
    )
    repo, _ = _repo(cur)

    result = repo.close_session(
        attendance_id=9, clock_out_time=now, total_hours=Decimal("8.00"), notes=None, updated_at=now
    )

    assert result.status == AttendanceStatus.COMPLETED
    assert result.total_hours == Decimal("8.00")
    assert cur.executed[1][1] == (9,)


def test_duplicate_active_session_is_translated():
    cur = FakeCursor(error=mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062))
    repo, conn = _repo(cur)

    with pytest.raises(DuplicateKeyError):
        repo.create_clock_in(user_id=1, work_date=date(2026, 2, 2), clock_in_time=datetime(2026, 2, 2, 9, 0))

    assert conn.rolled_back
    assert not conn.committed

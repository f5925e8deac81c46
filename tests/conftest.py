from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.attendance_api.attendance_api.attendance.model import (
    AttendanceCriteria,
    AttendanceRecord,
    AttendanceRow,
    AttendanceSort,
    UserSummaryRow,
)
from src.attendance_api.attendance_api.attendance.service import SessionTracker
from src.attendance_api.attendance_api.container import build_services
from src.attendance_api.attendance_api.core.enums import AttendanceStatus, Role
from src.attendance_api.attendance_api.core.exceptions import DuplicateKeyError
from src.attendance_api.attendance_api.reports.service import ReportAggregator
from src.attendance_api.attendance_api.users.model import User, UserProfile
from src.attendance_api.attendance_api.users.tokens import TokenService


class InMemoryUsers:
    def __init__(self):
        self.users_by_id: dict[int, User] = {}
        self._id = 0

    def add(self, name: str, email: str, *, role: Role = Role.EMPLOYEE, password: str = "secret123") -> User:
        user_id = self.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
        )
        return self.users_by_id[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        for u in self.users_by_id.values():
            if u.email == email:
                return u
        return None

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        if self.get_by_email(email):
            raise DuplicateKeyError(f"Duplicate entry '{email}'")
        self._id += 1
        self.users_by_id[self._id] = User(
            user_id=self._id, name=name, email=email, password_hash=password_hash, role=role
        )
        return self._id

    def update_user(self, *, user_id, name=None, email=None, password_hash=None, role=None) -> Optional[User]:
        user = self.users_by_id.get(int(user_id))
        if not user:
            return None
        user = dataclasses.replace(
            user,
            name=name if name is not None else user.name,
            email=email if email is not None else user.email,
            password_hash=password_hash if password_hash is not None else user.password_hash,
            role=role if role is not None else user.role,
        )
        self.users_by_id[user.user_id] = user
        return user

    def list_profiles(self):
        return [UserProfile(user_id=u.user_id, name=u.name, email=u.email, role=u.role) for u in self.users_by_id.values()]


class InMemoryAttendance:
    """Mirrors the MySQL repository, including the one-active-session unique key."""

    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0
        self.writes = 0

    def _active_for(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for r in self.records.values():
            if r.user_id == user_id and r.work_date == work_date and r.is_active:
                return r
        return None

    def _row(self, r: AttendanceRecord) -> AttendanceRow:
        u = self._users.get_by_id(r.user_id)
        return AttendanceRow(record=r, name=u.name, email=u.email, role=u.role)

    def add(self, **fields) -> AttendanceRecord:
        """Insert a record directly (test setup)."""
        self._id += 1
        rec = AttendanceRecord(attendance_id=self._id, **fields)
        self.records[self._id] = rec
        return rec

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(int(attendance_id))

    def get_active(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._active_for(user_id, work_date)

    def get_active_row(self, user_id: int, work_date: date) -> Optional[AttendanceRow]:
        r = self._active_for(user_id, work_date)
        return self._row(r) if r else None

    def create_clock_in(self, *, user_id, work_date, clock_in_time, notes=None) -> AttendanceRecord:
        if self._active_for(user_id, work_date):
            raise DuplicateKeyError("Duplicate entry for key 'uq_attendance_one_active'")
        self.writes += 1
        return self.add(
            user_id=user_id,
            work_date=work_date,
            clock_in_time=clock_in_time,
            clock_out_time=None,
            status=AttendanceStatus.ACTIVE,
            notes=notes,
            updated_at=clock_in_time,
        )

    def close_session(self, *, attendance_id, clock_out_time, total_hours, notes, updated_at):
        r = self.records.get(int(attendance_id))
        if not r or not r.is_active:
            return None
        self.writes += 1
        r = dataclasses.replace(
            r,
            clock_out_time=clock_out_time,
            total_hours=total_hours,
            notes=notes if notes is not None else r.notes,
            status=AttendanceStatus.COMPLETED,
            updated_at=updated_at,
        )
        self.records[r.attendance_id] = r
        return r

    def admin_update_record(
        self, *, attendance_id, clock_in_time=None, clock_out_time=None, notes=None, status=None, updated_at
    ):
        r = self.records.get(int(attendance_id))
        if not r:
            return None
        if status == AttendanceStatus.ACTIVE and not r.is_active:
            if self._active_for(r.user_id, r.work_date):
                raise DuplicateKeyError("Duplicate entry for key 'uq_attendance_one_active'")
        self.writes += 1
        r = dataclasses.replace(
            r,
            clock_in_time=clock_in_time or r.clock_in_time,
            clock_out_time=clock_out_time or r.clock_out_time,
            notes=notes if notes is not None else r.notes,
            status=status or r.status,
            updated_at=updated_at,
        )
        self.records[r.attendance_id] = r
        return r

    def _matching(self, criteria: AttendanceCriteria):
        out = []
        for r in self.records.values():
            if criteria.user_id is not None and r.user_id != criteria.user_id:
                continue
            if criteria.start_date is not None and r.work_date < criteria.start_date:
                continue
            if criteria.end_date is not None and r.work_date > criteria.end_date:
                continue
            out.append(self._row(r))
        return out

    def search(self, criteria, *, sort, limit, offset):
        rows = self._matching(criteria)
        rows.sort(key=lambda row: row.record.clock_in_time, reverse=True)
        if sort == AttendanceSort.NEWEST_FIRST_BY_NAME:
            rows.sort(key=lambda row: row.name)
        rows.sort(key=lambda row: row.record.work_date, reverse=True)
        return rows[offset:offset + limit]

    def count(self, criteria) -> int:
        return len(self._matching(criteria))

    def summarize_by_user(self, *, start_date, end_date, user_id=None):
        out = []
        users = sorted(self._users.users_by_id.values(), key=lambda u: (u.name, u.user_id))
        for u in users:
            if user_id is not None and u.user_id != user_id:
                continue
            recs = [
                r for r in self.records.values()
                if r.user_id == u.user_id and start_date <= r.work_date <= end_date
            ]
            closed = [r.total_hours for r in recs if r.total_hours is not None]
            out.append(
                UserSummaryRow(
                    user_id=u.user_id,
                    name=u.name,
                    email=u.email,
                    role=u.role,
                    total_days_worked=len(recs),
                    total_hours_worked=sum(closed, Decimal("0")),
                    average_hours_per_day=(sum(closed, Decimal("0")) / len(closed)) if closed else Decimal("0"),
                    incomplete_days=sum(1 for r in recs if r.is_active),
                )
            )
        return out


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def attendance_repo(users_repo) -> InMemoryAttendance:
    return InMemoryAttendance(users_repo)


@pytest.fixture
def alice(users_repo) -> User:
    return users_repo.add("Alice", "alice@example.com")


@pytest.fixture
def admin(users_repo) -> User:
    return users_repo.add("Root Admin", "admin@example.com", role=Role.ADMIN, password="admin123")


@pytest.fixture
def tracker(attendance_repo, users_repo) -> SessionTracker:
    return SessionTracker(attendance_repo, users_repo)


@pytest.fixture
def aggregator(attendance_repo) -> ReportAggregator:
    return ReportAggregator(attendance_repo)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService("test-jwt-secret", expiration_minutes=5)


@pytest.fixture
def container(users_repo, attendance_repo, token_service):
    return build_services(users_repo=users_repo, attendance_repo=attendance_repo, token_service=token_service)

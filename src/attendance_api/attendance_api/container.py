from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import SessionTracker
from .database.connection import DatabaseConnection, DBConfig
from .reports.service import ReportAggregator
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    attendance_repo: AttendanceRepository

    token_service: TokenService
    auth_service: AuthService
    user_service: UserService
    session_tracker: SessionTracker
    report_aggregator: ReportAggregator


def build_services(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    token_service: TokenService,
) -> Container:
    return Container(
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        token_service=token_service,
        auth_service=AuthService(users_repo, token_service),
        user_service=UserService(users_repo),
        session_tracker=SessionTracker(attendance_repo, users_repo),
        report_aggregator=ReportAggregator(attendance_repo),
    )


def build_container(*, db_config: dict, token_service: TokenService) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        token_service=token_service,
    )

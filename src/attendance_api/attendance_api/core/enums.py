from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Lifecycle state of an attendance record.

    ACTIVE means the session is open (clock-out not recorded yet).
    """

    ACTIVE = "active"
    COMPLETED = "completed"

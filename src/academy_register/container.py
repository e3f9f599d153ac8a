from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Any

from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .common.datetime_utils import get_zone
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .enrollment.mysql_booking_repository import MySQLBookingRepository
from .enrollment.mysql_child_repository import MySQLChildRepository
from .enrollment.repository import BookingRepository, ChildRepository
from .enrollment.service import EnrollmentSnapshotter
from .registers.mysql_register_repository import MySQLRegisterRepository
from .registers.repository import RegisterRepository
from .registers.service import RegisterService
from .sessions.service import SessionProjector, SessionService


@dataclass(frozen=True)
class Container:
    classes_repo: ClassRepository
    bookings_repo: BookingRepository
    children_repo: ChildRepository
    registers_repo: RegisterRepository

    enrollment: EnrollmentSnapshotter
    projector: SessionProjector
    session_service: SessionService
    register_service: RegisterService


def _setting(settings: Any, name: str, default: Any) -> Any:
    return getattr(settings, name, default)


def build_services(
    settings: ModuleType | Any,
    *,
    classes_repo: ClassRepository,
    bookings_repo: BookingRepository,
    children_repo: ChildRepository,
    registers_repo: RegisterRepository,
) -> Container:
    """Wire services over any repository implementations."""

    zone = get_zone(_setting(settings, "ACADEMY_TIMEZONE", constants.DEFAULT_TIMEZONE))

    enrollment = EnrollmentSnapshotter(
        bookings_repo,
        children_repo,
        active_statuses=_setting(settings, "ACTIVE_BOOKING_STATUSES", constants.DEFAULT_ACTIVE_BOOKING_STATUSES),
    )
    projector = SessionProjector(
        zone,
        window_days=_setting(settings, "SESSION_WINDOW_DAYS", constants.DEFAULT_SESSION_WINDOW_DAYS),
    )
    session_service = SessionService(classes_repo, enrollment, projector)
    register_service = RegisterService(
        registers_repo,
        classes_repo,
        children_repo,
        enrollment,
        zone=zone,
        lead_minutes=_setting(settings, "REGISTER_LEAD_MINUTES", constants.DEFAULT_LEAD_MINUTES),
        lock_hours=_setting(settings, "REGISTER_LOCK_HOURS", constants.DEFAULT_LOCK_HOURS),
        save_attempts=_setting(settings, "REGISTER_SAVE_ATTEMPTS", constants.DEFAULT_SAVE_ATTEMPTS),
    )

    return Container(
        classes_repo=classes_repo,
        bookings_repo=bookings_repo,
        children_repo=children_repo,
        registers_repo=registers_repo,
        enrollment=enrollment,
        projector=projector,
        session_service=session_service,
        register_service=register_service,
    )


def build_container(settings: ModuleType | Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(settings.DB_CONFIG))
    return build_services(
        settings,
        classes_repo=MySQLClassRepository(conn),
        bookings_repo=MySQLBookingRepository(conn),
        children_repo=MySQLChildRepository(conn),
        registers_repo=MySQLRegisterRepository(conn),
    )

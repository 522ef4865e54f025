from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRecordRepository
from .attendance.pipeline import DailyAttendancePipeline
from .core.settings import EngineSettings
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.service import CorrectionService
from .database.connection import DBConfig, DatabaseConnection
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .overtime.mysql_overtime_policy_repository import MySQLOvertimePolicyRepository
from .processing.service import AttendanceProcessingService
from .punches.mysql_punch_repository import MySQLPunchRepository
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.resolver import ShiftResolver
from .staff.mysql_staff_repository import MySQLStaffRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    settings: EngineSettings

    staff_repo: MySQLStaffRepository
    punches_repo: MySQLPunchRepository
    shifts_repo: MySQLShiftRepository
    policies_repo: MySQLOvertimePolicyRepository
    leave_repo: MySQLLeaveRepository
    records_repo: MySQLAttendanceRecordRepository
    corrections_repo: MySQLCorrectionRepository

    processing_service: AttendanceProcessingService
    correction_service: CorrectionService


def build_container(*, db_config: dict, settings: EngineSettings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config), pool_size=settings.batch_workers + 1)

    staff_repo = MySQLStaffRepository(conn)
    punches_repo = MySQLPunchRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    policies_repo = MySQLOvertimePolicyRepository(conn)
    leave_repo = MySQLLeaveRepository(conn)
    records_repo = MySQLAttendanceRecordRepository(conn)
    corrections_repo = MySQLCorrectionRepository(conn)

    shift_resolver = ShiftResolver(
        shifts_repo,
        shifts_repo,
        shifts_repo,
        default_timezone=settings.default_timezone,
    )
    processing_service = AttendanceProcessingService(
        settings=settings,
        staff=staff_repo,
        punches=punches_repo,
        shift_resolver=shift_resolver,
        policies=policies_repo,
        leaves=leave_repo,
        holidays=leave_repo,
        records=records_repo,
        corrections=corrections_repo,
        pipeline=DailyAttendancePipeline(settings),
    )
    correction_service = CorrectionService(corrections_repo, records_repo, processing_service)

    return Container(
        conn=conn,
        settings=settings,
        staff_repo=staff_repo,
        punches_repo=punches_repo,
        shifts_repo=shifts_repo,
        policies_repo=policies_repo,
        leave_repo=leave_repo,
        records_repo=records_repo,
        corrections_repo=corrections_repo,
        processing_service=processing_service,
        correction_service=correction_service,
    )

from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .access.factory import ScopeStrategyFactory
from .attendance.aggregator import AttendanceStatsAggregator
from .attendance.batch_fetcher import BatchedLogFetcher
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_LOG_FETCH_CHUNK_SIZE, DEFAULT_LOG_FETCH_MAX_WORKERS, DEFAULT_PAGE_LIMIT
from .database.connection import DBConfig, DatabaseConnection
from .meetings.mysql_meeting_repository import MySQLMeetingRepository
from .meetings.service import MeetingService
from .organization.mysql_organization_repository import MySQLOrganizationRepository
from .students.mysql_student_repository import MySQLStudentRepository
from .users.mysql_profile_repository import MySQLProfileRepository
from .users.service import ViewerService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    profiles_repo: MySQLProfileRepository
    organization_repo: MySQLOrganizationRepository
    students_repo: MySQLStudentRepository
    meetings_repo: MySQLMeetingRepository
    attendance_repo: MySQLAttendanceRepository

    viewer_service: ViewerService
    meeting_service: MeetingService
    attendance_service: AttendanceService


def build_container(*, db_config: dict, settings: Optional[ModuleType] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    profiles_repo = MySQLProfileRepository(conn)
    organization_repo = MySQLOrganizationRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    meetings_repo = MySQLMeetingRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    fetcher = BatchedLogFetcher(
        attendance_repo,
        chunk_size=int(getattr(settings, "LOG_FETCH_CHUNK_SIZE", DEFAULT_LOG_FETCH_CHUNK_SIZE)),
        max_workers=int(getattr(settings, "LOG_FETCH_MAX_WORKERS", DEFAULT_LOG_FETCH_MAX_WORKERS)),
    )

    viewer_service = ViewerService(profiles_repo)
    meeting_service = MeetingService(
        meetings_repo,
        attendance_repo,
        organization_repo,
        students_repo,
        fetcher=fetcher,
        aggregator=AttendanceStatsAggregator(),
        strategy_factory=ScopeStrategyFactory(),
        default_limit=int(getattr(settings, "DEFAULT_PAGE_LIMIT", DEFAULT_PAGE_LIMIT)),
    )
    attendance_service = AttendanceService(attendance_repo, meeting_service)

    return Container(
        conn=conn,
        profiles_repo=profiles_repo,
        organization_repo=organization_repo,
        students_repo=students_repo,
        meetings_repo=meetings_repo,
        attendance_repo=attendance_repo,
        viewer_service=viewer_service,
        meeting_service=meeting_service,
        attendance_service=attendance_service,
    )

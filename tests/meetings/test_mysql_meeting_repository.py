from __future__ import annotations

from datetime import date, datetime

from src.absensi.absensi.meetings.mysql_meeting_repository import MySQLMeetingRepository


class RecordingCursor:
    def __init__(self):
        self.statements: list[tuple[str, tuple]] = []
        self.rowcount = 1

    def execute(self, sql, params=()):
        self.statements.append((" ".join(sql.split()), tuple(params)))

    def close(self):
        pass


class RecordingConn:
    def __init__(self):
        self.cur = RecordingCursor()
        self.commits = 0

    def cursor(self, dictionary=True):
        return self.cur

    def commit(self):
        self.commits += 1

    def rollback(self):
        pass

    def close(self):
        pass


class RecordingFactory:
    def __init__(self):
        self.conn = RecordingConn()
        self.connects = 0

    def connect(self):
        self.connects += 1
        return self.conn


def test_update_moves_attendance_log_dates_in_same_transaction():
    factory = RecordingFactory()
    repo = MySQLMeetingRepository(factory)
    new_day = date(2026, 3, 15)

    repo.update(
        meeting_id="m1",
        title="Doa harian",
        date=new_day,
        topic=None,
        description=None,
        student_snapshot=None,
        updated_at=datetime(2026, 3, 10, 19, 30),
    )

    (meeting_sql, meeting_params), (logs_sql, logs_params) = factory.conn.cur.statements
    assert meeting_sql.startswith("UPDATE meetings SET")
    assert "student_snapshot" not in meeting_sql
    assert meeting_params[-1] == "m1"
    assert logs_sql.startswith("UPDATE attendance_logs SET date=%s WHERE meeting_id=%s")
    assert logs_params == (new_day, "m1", new_day)
    assert factory.connects == 1 and factory.conn.commits == 1


def test_update_with_roster_writes_snapshot_json():
    factory = RecordingFactory()

    MySQLMeetingRepository(factory).update(
        meeting_id="m1",
        title="Susulan",
        date=date(2026, 3, 15),
        topic="Adab",
        description=None,
        student_snapshot=("s1", "s2"),
        updated_at=datetime(2026, 3, 10, 19, 30),
    )

    meeting_sql, meeting_params = factory.conn.cur.statements[0]
    assert "student_snapshot=%s" in meeting_sql
    assert '["s1", "s2"]' in meeting_params

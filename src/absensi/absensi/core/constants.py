"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

# Practical ceiling for "meeting_id IN (...)" lists per query.
DEFAULT_LOG_FETCH_CHUNK_SIZE = 10
DEFAULT_LOG_FETCH_MAX_WORKERS = 4

UNKNOWN_CLASS_NAME = "Unknown"

TEACHER_CLASS_KEYWORD = "pengajar"
CABERAWIT_CATEGORY_CODES = frozenset({"CABERAWIT", "PAUD"})

# MySQL ER_ROW_IS_REFERENCED_2
MYSQL_FK_VIOLATION_ERRNO = 1451

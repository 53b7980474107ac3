from enum import Enum


class RoleLevelEnum(int, Enum):
    ADMIN = 1
    ZONAL_OFFICER = 2
    REGIONAL_OFFICER = 3
    SUPERVISOR = 4
    ENUMERATOR = 5

class QuestionTypeEnum(str, Enum):
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"

class ComplexityEnum(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

class SessionStatusEnum(str, Enum):
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    TIMEOUT = "timeout"

ACTIVE_SESSION_STATUSES = (SessionStatusEnum.IN_PROGRESS, SessionStatusEnum.PAUSED)
TERMINAL_SESSION_STATUSES = (SessionStatusEnum.COMPLETED, SessionStatusEnum.TIMEOUT)

class PauseReasonEnum(str, Enum):
    MANUAL = "manual"
    NETWORK = "network"

class CertificateStatusEnum(str, Enum):
    ACTIVE = "active"
    REVOKED = "revoked"
    EXPIRED = "expired"

class GradeEnum(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

class ActivityTypeEnum(str, Enum):
    SESSION_STARTED = "test_started"
    SESSION_PAUSED = "test_paused"
    SESSION_RESUMED = "test_resumed"
    SESSION_COMPLETED = "test_completed"
    SESSION_TIMED_OUT = "test_timeout"
    CERTIFICATE_ISSUED = "certificate_issued"
    CERTIFICATE_REVOKED = "certificate_revoked"
    CERTIFICATE_DOWNLOADED = "certificate_downloaded"
    CERTIFICATE_EXPIRED = "certificate_expired"


def enum_values(enum_cls):
    """Store enum columns by value so raw predicates can use the lowercase names."""
    return [member.value for member in enum_cls]

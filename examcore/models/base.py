# Import every model so Base.metadata and relationship() targets are complete
# before the mappers are configured (app startup, tests, alembic).
from examcore.core.database import Base  # noqa: F401
from examcore.models.role import Role  # noqa: F401
from examcore.models.user import User  # noqa: F401
from examcore.models.survey import Survey, SurveySection, SurveyAssignment  # noqa: F401
from examcore.models.question import Question, QuestionOption  # noqa: F401
from examcore.models.test_session import TestSession  # noqa: F401
from examcore.models.test_answer import TestAnswer  # noqa: F401
from examcore.models.test_result import TestResult, SectionScore  # noqa: F401
from examcore.models.certificate import Certificate  # noqa: F401
from examcore.models.activity_log import ActivityLog  # noqa: F401

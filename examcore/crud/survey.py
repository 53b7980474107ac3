from sqlalchemy import or_
from sqlalchemy.orm import Session

from examcore.crud.base import CRUDBase
from examcore.models.survey import Survey, SurveyAssignment
from examcore.models.user import User

class CRUDSurvey(CRUDBase[Survey]):
    pass


class CRUDSurveyAssignment(CRUDBase[SurveyAssignment]):

    def has_assignments(self, db: Session, *, survey_id: int) -> bool:
        return (
            db.query(SurveyAssignment.id)
            .filter(SurveyAssignment.survey_id == survey_id, SurveyAssignment.is_active == True)
            .first()
            is not None
        )

    def is_assigned(self, db: Session, *, survey_id: int, user: User) -> bool:
        """True when any active assignment targets the user directly, by role, or by jurisdiction."""
        targets = [SurveyAssignment.user_id == user.id, SurveyAssignment.role_id == user.role_id]
        if user.zone:
            targets.append(SurveyAssignment.zone == user.zone)
        if user.region:
            targets.append(SurveyAssignment.region == user.region)
        if user.district:
            targets.append(SurveyAssignment.district == user.district)
        return (
            db.query(SurveyAssignment.id)
            .filter(
                SurveyAssignment.survey_id == survey_id,
                SurveyAssignment.is_active == True,
                or_(*targets),
            )
            .first()
            is not None
        )


survey = CRUDSurvey(Survey)
survey_assignment = CRUDSurveyAssignment(SurveyAssignment)

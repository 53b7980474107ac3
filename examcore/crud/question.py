from typing import List
from sqlalchemy.orm import Session, selectinload

from examcore.crud.base import CRUDBase
from examcore.models.question import Question
from examcore.models.survey import SurveySection

class CRUDQuestion(CRUDBase[Question]):
    def get_live_by_survey(self, db: Session, *, survey_id: int) -> List[Question]:
        """Questions of a survey that have not been soft-deleted, with their options."""
        return (
            self._base_query(db)
            .options(selectinload(Question.options))
            .join(SurveySection, SurveySection.id == Question.section_id)
            .filter(SurveySection.survey_id == survey_id)
            .order_by(SurveySection.section_order, Question.question_order, Question.id)
            .all()
        )

    def get_sections_by_survey(self, db: Session, *, survey_id: int) -> List[SurveySection]:
        return (
            db.query(SurveySection)
            .filter(SurveySection.survey_id == survey_id)
            .order_by(SurveySection.section_order, SurveySection.id)
            .all()
        )

question = CRUDQuestion(Question)

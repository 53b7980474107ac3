from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, FrozenSet, List
from decimal import Decimal

from examcore.core.constants import QuestionTypeEnum, GradeEnum


class BankSection(BaseModel):
    id: int
    title: str
    order: int = 1

    model_config = ConfigDict(frozen=True)


class BankQuestion(BaseModel):
    id: int
    section_id: int
    question_type: QuestionTypeEnum
    points: int = Field(1, ge=0)
    option_ids: FrozenSet[int] = frozenset()
    correct_option_ids: FrozenSet[int] = frozenset()

    model_config = ConfigDict(frozen=True)


class QuestionBank(BaseModel):
    """Read-only snapshot of a survey's sections and live questions."""
    sections: List[BankSection] = []
    questions: Dict[int, BankQuestion] = {}

    model_config = ConfigDict(frozen=True)


class SubmittedAnswer(BaseModel):
    question_id: int
    selected_option_ids: FrozenSet[int] = frozenset()

    model_config = ConfigDict(frozen=True)


class SectionScoreCard(BaseModel):
    section_id: int
    section_title: str
    score: Decimal
    earned_points: int
    possible_points: int
    total_questions: int
    correct_answers: int


class ScoreCard(BaseModel):
    score: Decimal
    earned_points: int
    possible_points: int
    total_questions: int
    correct_answers: int
    is_passed: bool
    grade: GradeEnum
    sections: List[SectionScoreCard] = []
    correctness: Dict[int, bool] = {}
    excluded_question_ids: List[int] = []

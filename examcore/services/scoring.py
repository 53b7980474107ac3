import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Dict, FrozenSet

from examcore.core.constants import GradeEnum
from examcore.schemas.scoring import (
    QuestionBank,
    BankQuestion,
    SubmittedAnswer,
    SectionScoreCard,
    ScoreCard,
)

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")

# Fixed thresholds. With passing_score above 60, D can never be awarded.
GRADE_THRESHOLDS = (
    (Decimal(90), GradeEnum.A),
    (Decimal(75), GradeEnum.B),
    (Decimal(60), GradeEnum.C),
)


def percentage(earned: int, possible: int) -> Decimal:
    if possible <= 0:
        return ZERO
    return (Decimal(earned) * 100 / Decimal(possible)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def grade_for(score: Decimal, passing_score) -> GradeEnum:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    if score >= Decimal(passing_score):
        return GradeEnum.D
    return GradeEnum.F


def is_correct(question: BankQuestion, selected: FrozenSet[int]) -> bool:
    """Exact match: the selected set must equal the correct set. No partial credit."""
    if not selected:
        return False
    return frozenset(selected) == question.correct_option_ids


def score_session(bank: QuestionBank, answers: Iterable[SubmittedAnswer], passing_score) -> ScoreCard:
    """Score one session against a question bank.

    Every live question in the bank counts, answered or not. Answers pointing at
    questions missing from the bank are left out of both earned and possible
    points and reported in ``excluded_question_ids``.
    """
    selections: Dict[int, FrozenSet[int]] = {}
    excluded = []
    for answer in answers:
        if answer.question_id not in bank.questions:
            excluded.append(answer.question_id)
            continue
        selections[answer.question_id] = answer.selected_option_ids

    if excluded:
        logger.warning(
            f"Data integrity: {len(excluded)} answer(s) reference questions no longer in the bank "
            f"and were excluded from scoring: {sorted(excluded)}"
        )

    per_section = {
        section.id: {"earned": 0, "possible": 0, "total": 0, "correct": 0}
        for section in bank.sections
    }
    correctness: Dict[int, bool] = {}
    earned = possible = correct_count = 0

    for question_id in sorted(bank.questions):
        question = bank.questions[question_id]
        correct = is_correct(question, selections.get(question_id, frozenset()))
        correctness[question_id] = correct

        bucket = per_section.setdefault(question.section_id, {"earned": 0, "possible": 0, "total": 0, "correct": 0})
        bucket["possible"] += question.points
        bucket["total"] += 1
        possible += question.points
        if correct:
            bucket["earned"] += question.points
            bucket["correct"] += 1
            earned += question.points
            correct_count += 1

    section_cards = []
    for section in sorted(bank.sections, key=lambda s: (s.order, s.id)):
        bucket = per_section[section.id]
        section_cards.append(
            SectionScoreCard(
                section_id=section.id,
                section_title=section.title,
                score=percentage(bucket["earned"], bucket["possible"]),
                earned_points=bucket["earned"],
                possible_points=bucket["possible"],
                total_questions=bucket["total"],
                correct_answers=bucket["correct"],
            )
        )

    overall = percentage(earned, possible)
    passed = overall >= Decimal(passing_score)

    logger.debug(f"Scored {correct_count}/{len(bank.questions)} questions, {earned}/{possible} points -> {overall}")

    return ScoreCard(
        score=overall,
        earned_points=earned,
        possible_points=possible,
        total_questions=len(bank.questions),
        correct_answers=correct_count,
        is_passed=passed,
        grade=grade_for(overall, passing_score),
        sections=section_cards,
        correctness=correctness,
        excluded_question_ids=sorted(excluded),
    )

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examcore.core.database import Base
from examcore.core.constants import QuestionTypeEnum, ComplexityEnum, enum_values

class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    section_id = Column(Integer, ForeignKey("survey_sections.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(String, nullable=False)
    question_type = Column(
        Enum(QuestionTypeEnum, values_callable=enum_values),
        nullable=False,
        default=QuestionTypeEnum.SINGLE_CHOICE,
    )
    complexity = Column(Enum(ComplexityEnum, values_callable=enum_values), nullable=False, default=ComplexityEnum.MEDIUM)
    points = Column(Integer, nullable=False, default=1)
    explanation = Column(String, nullable=True)
    question_order = Column(Integer, nullable=False, default=1)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    section = relationship("SurveySection", back_populates="questions")
    options = relationship(
        "QuestionOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOption.option_order",
    )

    @property
    def correct_option_ids(self) -> set:
        return {option.id for option in self.options if option.is_correct}


class QuestionOption(Base):
    __tablename__ = "question_options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(String, nullable=False)
    is_correct = Column(Boolean, default=False)
    option_order = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())

    question = relationship("Question", back_populates="options")

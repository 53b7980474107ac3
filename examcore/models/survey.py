from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examcore.core.database import Base

class Survey(Base):
    __tablename__ = "surveys"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), index=True, nullable=False)
    description = Column(String, nullable=True)
    code = Column(String(20), nullable=True)  # certificate number prefix
    target_date = Column(Date, nullable=True)
    duration = Column(Integer, nullable=False, default=35)  # minutes
    total_questions = Column(Integer, nullable=False, default=30)
    passing_score = Column(Integer, nullable=False, default=70)
    max_attempts = Column(Integer, nullable=False, default=3)
    certificate_validity_days = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    sections = relationship(
        "SurveySection",
        back_populates="survey",
        cascade="all, delete-orphan",
        order_by="SurveySection.section_order",
    )
    assignments = relationship("SurveyAssignment", back_populates="survey", cascade="all, delete-orphan")


class SurveySection(Base):
    __tablename__ = "survey_sections"

    id = Column(Integer, primary_key=True, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String, nullable=True)
    questions_count = Column(Integer, nullable=False, default=10)
    section_order = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    survey = relationship("Survey", back_populates="sections")
    questions = relationship(
        "Question",
        back_populates="section",
        cascade="all, delete-orphan",
        order_by="Question.question_order",
    )


class SurveyAssignment(Base):
    """Targets a survey at a user, a role, or a jurisdiction. Surveys without assignments are open."""
    __tablename__ = "survey_assignments"

    id = Column(Integer, primary_key=True, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=True)
    zone = Column(String(100), nullable=True)
    region = Column(String(100), nullable=True)
    district = Column(String(100), nullable=True)
    assigned_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())

    survey = relationship("Survey", back_populates="assignments")

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examcore.core.database import Base

class TestResult(Base):
    """Scored outcome of one terminated session. Written once, never updated except for the certificate link."""
    __tablename__ = "test_results"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("test_sessions.id"), nullable=False, unique=True)
    score = Column(Numeric(5, 2), nullable=False)
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    is_passed = Column(Boolean, nullable=False)
    grade = Column(String(2), nullable=True)
    time_spent = Column(Integer, nullable=False)  # seconds of budget consumed
    attempt_number = Column(Integer, nullable=False)
    completed_at = Column(DateTime, nullable=False)
    certificate_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="results")
    survey = relationship("Survey")
    session = relationship("TestSession", back_populates="result")
    section_scores = relationship(
        "SectionScore",
        back_populates="result",
        cascade="all, delete-orphan",
        order_by="SectionScore.id",
    )
    certificate = relationship("Certificate", back_populates="result", uselist=False)


class SectionScore(Base):
    __tablename__ = "section_scores"

    id = Column(Integer, primary_key=True, index=True)
    result_id = Column(Integer, ForeignKey("test_results.id", ondelete="CASCADE"), nullable=False, index=True)
    section_id = Column(Integer, ForeignKey("survey_sections.id"), nullable=False)
    section_title = Column(String(255), nullable=False)
    score = Column(Numeric(5, 2), nullable=False)
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    result = relationship("TestResult", back_populates="section_scores")

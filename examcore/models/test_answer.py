from sqlalchemy import Column, Integer, DateTime, ForeignKey, Boolean, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examcore.core.database import Base

class TestAnswer(Base):
    __tablename__ = "test_answers"
    __table_args__ = (
        UniqueConstraint("session_id", "question_id", name="uq_test_answers_session_question"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("test_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    selected_options = Column(JSON, nullable=False, default=list)  # sorted unique option ids
    is_correct = Column(Boolean, default=False)
    time_spent = Column(Integer, default=0)  # seconds
    answered = Column(Boolean, default=False)
    is_flagged = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    session = relationship("TestSession", back_populates="answers")
    question = relationship("Question")

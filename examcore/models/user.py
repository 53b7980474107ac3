from sqlalchemy import Boolean, Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examcore.core.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # supervisor
    is_active = Column(Boolean(), default=True)

    # Jurisdiction, used for survey assignment matching
    zone = Column(String(255), nullable=True)
    region = Column(String(255), nullable=True)
    district = Column(String(255), nullable=True)
    employee_id = Column(String(100), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    role = relationship("Role", back_populates="users")
    parent = relationship("User", remote_side=[id], back_populates="reports")
    reports = relationship("User", back_populates="parent")
    test_sessions = relationship("TestSession", back_populates="user")
    results = relationship("TestResult", back_populates="user")
    certificates = relationship("Certificate", back_populates="user", foreign_keys="Certificate.user_id")

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examcore.core.database import Base
from examcore.core.constants import CertificateStatusEnum, enum_values

class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False)
    result_id = Column(Integer, ForeignKey("test_results.id", ondelete="CASCADE"), nullable=False, unique=True)
    certificate_number = Column(String(100), unique=True, nullable=False)
    issued_at = Column(DateTime, nullable=False)
    valid_until = Column(Date, nullable=True)
    download_count = Column(Integer, nullable=False, default=0)
    status = Column(
        Enum(CertificateStatusEnum, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
        default=CertificateStatusEnum.ACTIVE,
        index=True,
    )
    revoked_at = Column(DateTime, nullable=True)
    revoked_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    revocation_reason = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="certificates", foreign_keys=[user_id])
    survey = relationship("Survey")
    result = relationship("TestResult", back_populates="certificate")

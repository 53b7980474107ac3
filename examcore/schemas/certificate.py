from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime

from examcore.core.constants import CertificateStatusEnum


class Certificate(BaseModel):
    id: int
    user_id: int
    survey_id: int
    result_id: int
    certificate_number: str
    issued_at: datetime
    valid_until: Optional[date] = None
    download_count: int
    status: CertificateStatusEnum
    revoked_at: Optional[datetime] = None
    revoked_by: Optional[int] = None
    revocation_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CertificateRevoke(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)

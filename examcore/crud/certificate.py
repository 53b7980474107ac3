from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Iterable, List, Optional
from datetime import date

from examcore.core.constants import CertificateStatusEnum
from examcore.crud.base import CRUDBase
from examcore.models.certificate import Certificate

class CRUDCertificate(CRUDBase[Certificate]):

    def get_by_result(self, db: Session, *, result_id: int) -> Optional[Certificate]:
        return db.query(Certificate).filter(Certificate.result_id == result_id).first()

    def get_by_number(self, db: Session, *, certificate_number: str) -> Optional[Certificate]:
        return db.query(Certificate).filter(Certificate.certificate_number == certificate_number).first()

    def count_with_prefix(self, db: Session, *, prefix: str) -> int:
        return (
            db.query(func.count(Certificate.id))
            .filter(Certificate.certificate_number.like(f"{prefix}%"))
            .scalar()
        ) or 0

    def get_for_users(self, db: Session, *, user_ids: Iterable[int], skip: int = 0, limit: int = 100) -> List[Certificate]:
        return (
            db.query(Certificate)
            .filter(Certificate.user_id.in_(list(user_ids)))
            .order_by(Certificate.issued_at.desc(), Certificate.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_due_for_expiry(self, db: Session, *, today: date) -> List[Certificate]:
        return (
            db.query(Certificate)
            .filter(
                Certificate.status == CertificateStatusEnum.ACTIVE,
                Certificate.valid_until.isnot(None),
                Certificate.valid_until < today,
            )
            .order_by(Certificate.id)
            .all()
        )

    def increment_downloads(self, db: Session, *, certificate_id: int) -> int:
        """Atomic in-database increment; returns the number of rows touched."""
        return (
            db.query(Certificate)
            .filter(Certificate.id == certificate_id)
            .update({Certificate.download_count: Certificate.download_count + 1}, synchronize_session=False)
        )


certificate = CRUDCertificate(Certificate)

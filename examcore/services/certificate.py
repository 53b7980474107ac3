import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from examcore.core.clock import Clock, system_clock
from examcore.core.config import settings
from examcore.core.constants import CertificateStatusEnum, ActivityTypeEnum
from examcore.core.exceptions import (
    CertificateIssuanceFailed,
    CertificateNotFound,
    InvalidTransition,
    PersistenceError,
    ResultNotFound,
    ResultNotPassed,
)
from examcore.crud.certificate import certificate as crud_certificate
from examcore.crud.test_result import test_result as crud_test_result
from examcore.models.certificate import Certificate
from examcore.models.survey import Survey
from examcore.models.test_result import TestResult
from examcore.services.activity_log import activity_log_service

logger = logging.getLogger(__name__)

NumberGenerator = Callable[[Session, Survey, datetime, int], str]

MAX_ISSUE_ATTEMPTS = 2  # first try plus one retry on a number collision


def certificate_prefix(survey: Survey, issued_at: datetime) -> str:
    code = (survey.code or f"SRV{survey.id}").strip().upper()
    return f"{code}-{issued_at.year}-"


def sequential_number(db: Session, survey: Survey, issued_at: datetime, attempt: int) -> str:
    """``{CODE}-{YEAR}-{SEQ}``; a retry skips ahead so it never re-proposes the same number."""
    prefix = certificate_prefix(survey, issued_at)
    sequence = crud_certificate.count_with_prefix(db, prefix=prefix) + 1 + attempt
    return f"{prefix}{sequence:0{settings.CERTIFICATE_SEQUENCE_PADDING}d}"


class CertificateService:

    def __init__(self, clock: Clock = system_clock, number_generator: NumberGenerator = sequential_number):
        self.clock = clock
        self.number_generator = number_generator

    def issue_for_result(self, db: Session, result: TestResult) -> Certificate:
        """Issue inside the caller's transaction. Returns the existing certificate for an already certified result."""
        if not result.is_passed:
            raise ResultNotPassed()

        existing = crud_certificate.get_by_result(db, result_id=result.id)
        if existing:
            return existing

        survey = result.survey
        issued_at = self.clock.now()
        valid_until = None
        if survey.certificate_validity_days:
            valid_until = (issued_at + timedelta(days=survey.certificate_validity_days)).date()

        for attempt in range(MAX_ISSUE_ATTEMPTS):
            number = self.number_generator(db, survey, issued_at, attempt)
            savepoint = db.begin_nested()
            try:
                certificate = Certificate(
                    user_id=result.user_id,
                    survey_id=result.survey_id,
                    result_id=result.id,
                    certificate_number=number,
                    issued_at=issued_at,
                    valid_until=valid_until,
                    download_count=0,
                    status=CertificateStatusEnum.ACTIVE,
                )
                db.add(certificate)
                db.flush()
                savepoint.commit()
            except IntegrityError:
                savepoint.rollback()
                concurrent = crud_certificate.get_by_result(db, result_id=result.id)
                if concurrent:
                    return concurrent
                logger.warning(
                    f"Data integrity: certificate number {number} already taken "
                    f"(result {result.id}, attempt {attempt + 1}/{MAX_ISSUE_ATTEMPTS})"
                )
                continue

            result.certificate_id = certificate.id
            db.add(result)
            activity_log_service.record(
                db,
                activity_type=ActivityTypeEnum.CERTIFICATE_ISSUED,
                description=f"Certificate {number} issued",
                user_id=result.user_id,
                details={"certificate_number": number, "result_id": result.id, "survey_id": result.survey_id},
            )
            logger.info(f"Issued certificate {number} for result {result.id}")
            return certificate

        logger.error(f"Could not allocate a unique certificate number for result {result.id}")
        raise CertificateIssuanceFailed(context={"result_id": result.id})

    def issue(self, db: Session, result_id: int) -> Certificate:
        result = crud_test_result.get(db, id=result_id)
        if not result:
            raise ResultNotFound()
        try:
            certificate = self.issue_for_result(db, result)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to persist certificate for result {result_id}: {e}")
            raise PersistenceError()
        except Exception:
            db.rollback()
            raise
        db.refresh(certificate)
        return certificate

    def get(self, db: Session, certificate_id: int) -> Certificate:
        certificate = crud_certificate.get(db, id=certificate_id)
        if not certificate:
            raise CertificateNotFound()
        return certificate

    def verify(self, db: Session, certificate_number: str) -> Certificate:
        certificate = crud_certificate.get_by_number(db, certificate_number=certificate_number)
        if not certificate:
            raise CertificateNotFound()
        return certificate

    def revoke(self, db: Session, certificate_id: int, reason: str, revoked_by: int) -> Certificate:
        certificate = self.get(db, certificate_id)
        if certificate.status == CertificateStatusEnum.REVOKED:
            return certificate
        if certificate.status != CertificateStatusEnum.ACTIVE:
            raise InvalidTransition(f"Cannot revoke a certificate that is {certificate.status.value}.")

        certificate.status = CertificateStatusEnum.REVOKED
        certificate.revoked_at = self.clock.now()
        certificate.revoked_by = revoked_by
        certificate.revocation_reason = reason
        db.add(certificate)
        activity_log_service.record(
            db,
            activity_type=ActivityTypeEnum.CERTIFICATE_REVOKED,
            description=f"Certificate {certificate.certificate_number} revoked",
            user_id=revoked_by,
            details={"certificate_id": certificate.id, "reason": reason},
        )
        self._commit(db, f"revoke certificate {certificate_id}")
        db.refresh(certificate)
        return certificate

    def expire(self, certificate: Certificate, now: datetime) -> Certificate:
        """Pure transition of a due active certificate to expired. The scheduler decides when to call it."""
        if certificate.status == CertificateStatusEnum.EXPIRED:
            return certificate
        if certificate.status != CertificateStatusEnum.ACTIVE:
            raise InvalidTransition(f"Cannot expire a certificate that is {certificate.status.value}.")
        if certificate.valid_until is None or certificate.valid_until >= now.date():
            raise InvalidTransition("Certificate is still within its validity window.")
        certificate.status = CertificateStatusEnum.EXPIRED
        return certificate

    def expire_due(self, db: Session) -> int:
        now = self.clock.now()
        expired = 0
        for certificate in crud_certificate.get_due_for_expiry(db, today=now.date()):
            self.expire(certificate, now)
            db.add(certificate)
            activity_log_service.record(
                db,
                activity_type=ActivityTypeEnum.CERTIFICATE_EXPIRED,
                description=f"Certificate {certificate.certificate_number} expired",
                user_id=certificate.user_id,
                details={"certificate_id": certificate.id},
            )
            expired += 1
        if expired:
            self._commit(db, "certificate expiry sweep")
        return expired

    def record_download(self, db: Session, certificate_id: int, user_id: Optional[int] = None) -> Certificate:
        if not crud_certificate.increment_downloads(db, certificate_id=certificate_id):
            raise CertificateNotFound()
        activity_log_service.record(
            db,
            activity_type=ActivityTypeEnum.CERTIFICATE_DOWNLOADED,
            description=f"Certificate {certificate_id} downloaded",
            user_id=user_id,
            details={"certificate_id": certificate_id},
        )
        self._commit(db, f"record download of certificate {certificate_id}")
        certificate = self.get(db, certificate_id)
        db.refresh(certificate)
        return certificate

    def list_for_users(self, db: Session, user_ids, skip: int = 0, limit: int = 100) -> List[Certificate]:
        return crud_certificate.get_for_users(db, user_ids=user_ids, skip=skip, limit=limit)

    def _commit(self, db: Session, action: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError()


certificate_service = CertificateService()

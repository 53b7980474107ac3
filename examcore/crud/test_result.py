from sqlalchemy.orm import Session, selectinload
from typing import Iterable, List, Optional

from examcore.crud.base import CRUDBase
from examcore.models.test_result import TestResult

class CRUDTestResult(CRUDBase[TestResult]):

    def _query_with_relationships(self, db: Session):
        return db.query(TestResult).options(selectinload(TestResult.section_scores))

    def get(self, db: Session, id: int) -> Optional[TestResult]:
        return self._query_with_relationships(db).filter(TestResult.id == id).first()

    def get_by_session(self, db: Session, *, session_id: int) -> Optional[TestResult]:
        return self._query_with_relationships(db).filter(TestResult.session_id == session_id).first()

    def get_for_users(self, db: Session, *, user_ids: Iterable[int], skip: int = 0, limit: int = 100) -> List[TestResult]:
        return (
            self._query_with_relationships(db)
            .filter(TestResult.user_id.in_(list(user_ids)))
            .order_by(TestResult.completed_at.desc(), TestResult.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


test_result = CRUDTestResult(TestResult)

from sqlalchemy.orm import Session
from typing import List

from examcore.crud.base import CRUDBase
from examcore.models.activity_log import ActivityLog

class CRUDActivityLog(CRUDBase[ActivityLog]):

    def get_by_type(self, db: Session, *, activity_type: str, limit: int = 50) -> List[ActivityLog]:
        return (
            db.query(ActivityLog)
            .filter(ActivityLog.activity_type == activity_type)
            .order_by(ActivityLog.id.desc())
            .limit(limit)
            .all()
        )


activity_log = CRUDActivityLog(ActivityLog)

import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from examcore.core.constants import ActivityTypeEnum
from examcore.crud.activity_log import activity_log as crud_activity_log
from examcore.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


class ActivityLogService:
    """Audit trail rows written inside the caller's transaction."""

    def record(
        self,
        db: Session,
        *,
        activity_type: ActivityTypeEnum,
        description: str,
        user_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ActivityLog:
        entry = crud_activity_log.create(
            db,
            obj_in={
                "user_id": user_id,
                "activity_type": activity_type.value,
                "description": description,
                "details": details,
                "ip_address": ip_address,
                "user_agent": user_agent,
            },
            commit=False,
        )
        logger.info(f"Activity {activity_type.value}: {description}")
        return entry


activity_log_service = ActivityLogService()

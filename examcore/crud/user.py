from typing import Any, Optional, List, Tuple
from sqlalchemy.orm import Session, joinedload

from examcore.crud.base import CRUDBase
from examcore.models.user import User
from examcore.models.role import Role

class CRUDUser(CRUDBase[User]):
    def get(self, db: Session, id: Any) -> Optional[User]:
        return db.query(User).options(joinedload(User.role)).filter(User.id == id).first()

    def get_hierarchy_rows(self, db: Session) -> List[Tuple[int, Optional[int], int]]:
        """(user_id, parent_id, role_level) for every user, read straight from the tables."""
        rows = (
            db.query(User.id, User.parent_id, Role.level)
            .join(Role, Role.id == User.role_id)
            .all()
        )
        return [(row[0], row[1], row[2]) for row in rows]

user = CRUDUser(User)

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set
from sqlalchemy.orm import Session

from examcore.core.config import settings
from examcore.core.constants import RoleLevelEnum
from examcore.core.exceptions import UserNotFound
from examcore.crud.user import user as crud_user

logger = logging.getLogger(__name__)


@dataclass
class HierarchySnapshot:
    levels: Dict[int, int] = field(default_factory=dict)
    parents: Dict[int, Optional[int]] = field(default_factory=dict)
    children: Dict[int, List[int]] = field(default_factory=dict)
    loaded_at: float = 0.0

    @classmethod
    def build(cls, rows, loaded_at: float) -> "HierarchySnapshot":
        snapshot = cls(loaded_at=loaded_at)
        for user_id, parent_id, level in rows:
            snapshot.levels[user_id] = level
            snapshot.parents[user_id] = parent_id
            if parent_id is not None:
                snapshot.children.setdefault(parent_id, []).append(user_id)
        return snapshot


class RoleHierarchyResolver:
    """Answers "whose results may this user see" from the stored parent/role data.

    The relation is computed directly over a ``(user_id, parent_id, level)``
    snapshot of the users and roles tables. It never calls back into request
    authorization, so it cannot recurse into itself.
    """

    def __init__(
        self,
        ttl_seconds: int = settings.HIERARCHY_CACHE_TTL_SECONDS,
        max_depth: int = settings.HIERARCHY_MAX_DEPTH,
        supervisor_max_level: int = settings.SUPERVISOR_MAX_LEVEL,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_depth = max_depth
        self.supervisor_max_level = supervisor_max_level
        self._snapshot: Optional[HierarchySnapshot] = None
        self._lock = threading.Lock()

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None

    def _get_snapshot(self, db: Session) -> HierarchySnapshot:
        with self._lock:
            now = time.monotonic()
            if self._snapshot is not None and now - self._snapshot.loaded_at < self.ttl_seconds:
                return self._snapshot
            self._snapshot = HierarchySnapshot.build(crud_user.get_hierarchy_rows(db), loaded_at=now)
            return self._snapshot

    def _descendants(self, snapshot: HierarchySnapshot, root_id: int) -> List[int]:
        """Breadth-first walk under root, bounded by max_depth and safe against parent cycles."""
        found = []
        visited: Set[int] = {root_id}
        queue = deque((child, 1) for child in snapshot.children.get(root_id, []))
        while queue:
            user_id, depth = queue.popleft()
            if user_id in visited:
                logger.warning(f"Cycle in user hierarchy at user {user_id} under {root_id}")
                continue
            visited.add(user_id)
            found.append(user_id)
            if depth >= self.max_depth:
                if snapshot.children.get(user_id):
                    logger.warning(f"Hierarchy depth limit {self.max_depth} reached below user {root_id}")
                continue
            for child in snapshot.children.get(user_id, []):
                queue.append((child, depth + 1))
        return found

    def visible_user_ids(self, db: Session, requester_id: int) -> Set[int]:
        snapshot = self._get_snapshot(db)
        level = snapshot.levels.get(requester_id)
        if level is None:
            # Possibly created after the snapshot; reload once before giving up
            self.invalidate()
            snapshot = self._get_snapshot(db)
            level = snapshot.levels.get(requester_id)
            if level is None:
                raise UserNotFound()

        if level == RoleLevelEnum.ADMIN:
            return set(snapshot.levels)

        visible = {requester_id}
        visible.update(snapshot.children.get(requester_id, []))

        if level <= self.supervisor_max_level:
            for user_id in self._descendants(snapshot, requester_id):
                if snapshot.levels[user_id] > level:
                    visible.add(user_id)

        return visible

    def can_view(self, db: Session, requester_id: int, user_id: int) -> bool:
        if requester_id == user_id:
            return True
        return user_id in self.visible_user_ids(db, requester_id)


hierarchy_resolver = RoleHierarchyResolver()

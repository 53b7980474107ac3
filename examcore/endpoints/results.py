from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from examcore.core.exceptions import PermissionDenied, ResultNotFound
from examcore.crud.test_result import test_result as crud_test_result
from examcore.schemas.response import APIResponse
from examcore.schemas.test_result import TestResult
from examcore.schemas.user import UserContext
from examcore.services.hierarchy import RoleHierarchyResolver
from examcore.utils import deps

router = APIRouter()


@router.get("/", response_model=APIResponse[List[TestResult]])
def get_visible_results(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    resolver: RoleHierarchyResolver = Depends(deps.get_hierarchy_resolver),
    user_id: Optional[int] = Query(None, description="Only this user's results"),
    skip: int = 0,
    limit: int = 100,
):
    visible = resolver.visible_user_ids(db, context.user.id)
    if user_id is not None:
        if user_id not in visible:
            raise PermissionDenied()
        visible = {user_id}
    results = crud_test_result.get_for_users(db, user_ids=visible, skip=skip, limit=limit)
    return APIResponse(message="Results retrieved successfully", data=[TestResult.model_validate(r) for r in results])


@router.get("/{result_id}", response_model=APIResponse[TestResult])
def get_result(
    *,
    db: Session = Depends(deps.get_db),
    result_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    resolver: RoleHierarchyResolver = Depends(deps.get_hierarchy_resolver),
):
    result = crud_test_result.get(db, id=result_id)
    if not result:
        raise ResultNotFound()
    if not resolver.can_view(db, context.user.id, result.user_id):
        raise PermissionDenied()
    return APIResponse(message="Result retrieved successfully", data=TestResult.model_validate(result))

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from examcore.schemas.response import APIResponse
from examcore.schemas.user import UserContext, User, VisibleUsers
from examcore.services.hierarchy import RoleHierarchyResolver
from examcore.utils import deps

router = APIRouter()


@router.get("/me", response_model=APIResponse[User])
def get_me(context: UserContext = Depends(deps.get_current_user_with_context)):
    return APIResponse(message="User retrieved successfully", data=context.user)


@router.get("/visible", response_model=APIResponse[VisibleUsers])
def get_visible_users(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    resolver: RoleHierarchyResolver = Depends(deps.get_hierarchy_resolver),
):
    user_ids = resolver.visible_user_ids(db, context.user.id)
    return APIResponse(
        message="Visible users retrieved successfully",
        data=VisibleUsers(requester_id=context.user.id, user_ids=sorted(user_ids)),
    )

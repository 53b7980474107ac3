from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from examcore.core.config import settings
from examcore.core.constants import RoleLevelEnum
from examcore.core.database import SessionLocal
from examcore.core.exceptions import PermissionDenied
from examcore.crud.user import user as user_crud
from examcore.schemas.token import TokenPayload
from examcore.schemas.user import UserContext
from examcore.services.certificate import CertificateService, certificate_service
from examcore.services.hierarchy import RoleHierarchyResolver, hierarchy_resolver
from examcore.services.test_session import TestSessionService, test_session_service

http_bearer = HTTPBearer()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_session_service() -> TestSessionService:
    return test_session_service

def get_certificate_service() -> CertificateService:
    return certificate_service

def get_hierarchy_resolver() -> RoleHierarchyResolver:
    return hierarchy_resolver

def get_current_user_with_context(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer)
) -> UserContext:
    try:
        token = credentials.credentials
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.TOKEN_ALGORITHM]
        )
        token_data = TokenPayload(**payload)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    if token_data.user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    user = user_crud.get(db, id=token_data.user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    return UserContext(user=user, role=user.role)

def require_admin(context: UserContext = Depends(get_current_user_with_context)) -> UserContext:
    if context.role.level != RoleLevelEnum.ADMIN:
        raise PermissionDenied("Only administrators can perform this action.")
    return context

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from examcore.core.exceptions import PermissionDenied
from examcore.schemas.certificate import Certificate, CertificateRevoke
from examcore.schemas.response import APIResponse
from examcore.schemas.user import UserContext
from examcore.services.certificate import CertificateService
from examcore.services.hierarchy import RoleHierarchyResolver
from examcore.utils import deps

router = APIRouter()


@router.post("/results/{result_id}", response_model=APIResponse[Certificate], status_code=status.HTTP_201_CREATED)
def issue_certificate(
    *,
    db: Session = Depends(deps.get_db),
    result_id: int,
    context: UserContext = Depends(deps.require_admin),
    service: CertificateService = Depends(deps.get_certificate_service),
):
    certificate = service.issue(db, result_id)
    return APIResponse(message="Certificate issued", data=Certificate.model_validate(certificate))


@router.get("/", response_model=APIResponse[List[Certificate]])
def get_visible_certificates(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: CertificateService = Depends(deps.get_certificate_service),
    resolver: RoleHierarchyResolver = Depends(deps.get_hierarchy_resolver),
    user_id: Optional[int] = Query(None),
    skip: int = 0,
    limit: int = 100,
):
    visible = resolver.visible_user_ids(db, context.user.id)
    if user_id is not None:
        if user_id not in visible:
            raise PermissionDenied()
        visible = {user_id}
    certificates = service.list_for_users(db, visible, skip=skip, limit=limit)
    return APIResponse(message="Certificates retrieved successfully", data=[Certificate.model_validate(c) for c in certificates])


@router.get("/verify/{certificate_number}", response_model=APIResponse[Certificate])
def verify_certificate(
    *,
    db: Session = Depends(deps.get_db),
    certificate_number: str,
    service: CertificateService = Depends(deps.get_certificate_service),
):
    certificate = service.verify(db, certificate_number)
    return APIResponse(message=f"Certificate is {certificate.status.value}", data=Certificate.model_validate(certificate))


@router.post("/{certificate_id}/revoke", response_model=APIResponse[Certificate])
def revoke_certificate(
    *,
    db: Session = Depends(deps.get_db),
    certificate_id: int,
    revoke_in: CertificateRevoke,
    context: UserContext = Depends(deps.require_admin),
    service: CertificateService = Depends(deps.get_certificate_service),
):
    certificate = service.revoke(db, certificate_id, reason=revoke_in.reason, revoked_by=context.user.id)
    return APIResponse(message="Certificate revoked", data=Certificate.model_validate(certificate))


@router.post("/{certificate_id}/download", response_model=APIResponse[Certificate])
def download_certificate(
    *,
    db: Session = Depends(deps.get_db),
    certificate_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: CertificateService = Depends(deps.get_certificate_service),
    resolver: RoleHierarchyResolver = Depends(deps.get_hierarchy_resolver),
):
    certificate = service.get(db, certificate_id)
    if not resolver.can_view(db, context.user.id, certificate.user_id):
        raise PermissionDenied()
    certificate = service.record_download(db, certificate_id, user_id=context.user.id)
    return APIResponse(message="Certificate download recorded", data=Certificate.model_validate(certificate))

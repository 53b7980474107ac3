from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from examcore.core.exceptions import PermissionDenied
from examcore.models.test_session import TestSession as TestSessionModel
from examcore.schemas.response import APIResponse
from examcore.schemas.test_result import TestResult
from examcore.schemas.test_session import (
    TestSession,
    TestSessionStart,
    AnswerSubmit,
    AnswerAck,
    AutoSaveRequest,
    AutoSaveAck,
    NavigateRequest,
    PauseRequest,
    TimeRemaining,
)
from examcore.schemas.user import UserContext
from examcore.services.hierarchy import RoleHierarchyResolver
from examcore.services.test_session import TestSessionService
from examcore.utils import deps

router = APIRouter()


def _owned_session(db: Session, service: TestSessionService, session_id: int, context: UserContext) -> TestSessionModel:
    session = service.get(db, session_id)
    if session.user_id != context.user.id:
        raise PermissionDenied("Only the candidate can act on this test session.")
    return session


def _visible_session(
    db: Session,
    service: TestSessionService,
    resolver: RoleHierarchyResolver,
    session_id: int,
    context: UserContext,
) -> TestSessionModel:
    session = service.get(db, session_id)
    if not resolver.can_view(db, context.user.id, session.user_id):
        raise PermissionDenied()
    return session


@router.post("/", response_model=APIResponse[TestSession], status_code=status.HTTP_201_CREATED)
def start_session(
    *,
    db: Session = Depends(deps.get_db),
    session_in: TestSessionStart,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
):
    session = service.start(db, user_id=context.user.id, survey_id=session_in.survey_id)
    return APIResponse(message="Test session started", data=TestSession.model_validate(session))


@router.get("/", response_model=APIResponse[List[TestSession]])
def get_my_sessions(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
    skip: int = 0,
    limit: int = 100,
):
    sessions = service.list_for_user(db, user_id=context.user.id, skip=skip, limit=limit)
    return APIResponse(message="Test sessions retrieved successfully", data=[TestSession.model_validate(s) for s in sessions])


@router.get("/{session_id}", response_model=APIResponse[TestSession])
def get_session(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
    resolver: RoleHierarchyResolver = Depends(deps.get_hierarchy_resolver),
):
    session = _visible_session(db, service, resolver, session_id, context)
    return APIResponse(message="Test session retrieved successfully", data=TestSession.model_validate(session))


@router.post("/{session_id}/answers", response_model=APIResponse[AnswerAck])
def submit_answer(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    answer_in: AnswerSubmit,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
):
    _owned_session(db, service, session_id, context)
    ack = service.submit_answer(db, session_id, answer_in)
    message = "Answer saved" if ack.accepted else "Time is up; answer was not recorded"
    return APIResponse(message=message, data=ack)


@router.post("/{session_id}/autosave", response_model=APIResponse[AutoSaveAck])
def auto_save(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    save_in: AutoSaveRequest,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
):
    _owned_session(db, service, session_id, context)
    ack = service.auto_save(db, session_id, save_in)
    return APIResponse(message="Progress saved", data=ack)


@router.post("/{session_id}/navigate", response_model=APIResponse[TestSession])
def navigate(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    navigate_in: NavigateRequest,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
):
    _owned_session(db, service, session_id, context)
    session = service.navigate(db, session_id, navigate_in.question_index)
    return APIResponse(message="Moved to question", data=TestSession.model_validate(session))


@router.post("/{session_id}/pause", response_model=APIResponse[TestSession])
def pause_session(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    pause_in: PauseRequest = PauseRequest(),
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
):
    _owned_session(db, service, session_id, context)
    session = service.pause(db, session_id, reason=pause_in.reason)
    return APIResponse(message="Test session paused", data=TestSession.model_validate(session))


@router.post("/{session_id}/resume", response_model=APIResponse[TestSession])
def resume_session(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
):
    _owned_session(db, service, session_id, context)
    session = service.resume(db, session_id)
    return APIResponse(message="Test session resumed", data=TestSession.model_validate(session))


@router.post("/{session_id}/complete", response_model=APIResponse[TestResult])
def complete_session(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
):
    _owned_session(db, service, session_id, context)
    result = service.complete(db, session_id)
    return APIResponse(message="Test submitted successfully", data=TestResult.model_validate(result))


@router.get("/{session_id}/time-remaining", response_model=APIResponse[TimeRemaining])
def get_time_remaining(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
):
    _owned_session(db, service, session_id, context)
    remaining = service.get_time_remaining(db, session_id)
    return APIResponse(message="Time remaining retrieved", data=remaining)


@router.get("/{session_id}/result", response_model=APIResponse[TestResult])
def get_session_result(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    service: TestSessionService = Depends(deps.get_session_service),
    resolver: RoleHierarchyResolver = Depends(deps.get_hierarchy_resolver),
):
    _visible_session(db, service, resolver, session_id, context)
    result = service.get_result(db, session_id)
    return APIResponse(message="Result retrieved successfully", data=TestResult.model_validate(result))

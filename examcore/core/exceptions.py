from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class EngineError(HTTPException):
    """Typed engine failure. Raised synchronously to the caller and rendered by the global handler."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "ENGINE_ERROR"
    default_detail: str = "The request could not be processed."

    def __init__(self, detail: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)
        self.context = context or {}


# Unknown references

class SessionNotFound(EngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "SESSION_NOT_FOUND"
    default_detail = "Test session not found."

class SurveyNotFound(EngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "SURVEY_NOT_FOUND"
    default_detail = "Survey not found."

class UserNotFound(EngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "USER_NOT_FOUND"
    default_detail = "User not found."

class ResultNotFound(EngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "RESULT_NOT_FOUND"
    default_detail = "Result not found."

class CertificateNotFound(EngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "CERTIFICATE_NOT_FOUND"
    default_detail = "Certificate not found."

class UnknownQuestion(EngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "UNKNOWN_QUESTION"
    default_detail = "Question does not belong to this test session."

class InvalidOptionSelection(EngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_OPTION_SELECTION"
    default_detail = "Selected options are not valid for this question."


# Precondition violations

class AttemptLimitExceeded(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "ATTEMPT_LIMIT_EXCEEDED"
    default_detail = "Maximum number of attempts reached for this survey."

class SurveyInactive(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "SURVEY_INACTIVE"
    default_detail = "Survey is not active."

class SurveyNotAssigned(EngineError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "SURVEY_NOT_ASSIGNED"
    default_detail = "Survey is not assigned to this user."

class SessionNotActive(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "SESSION_NOT_ACTIVE"
    default_detail = "Test session is not in progress."

class InvalidTransition(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_TRANSITION"
    default_detail = "Transition is not allowed from the current state."

class NavigationNotAllowed(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "NAVIGATION_NOT_ALLOWED"
    default_detail = "Moving back to earlier questions is disabled."

class FeatureDisabled(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "FEATURE_DISABLED"
    default_detail = "This feature is disabled."

class ResultNotPassed(EngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "RESULT_NOT_PASSED"
    default_detail = "Certificates are only issued for passing results."

class PermissionDenied(EngineError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_detail = "You do not have permission to access this resource."


# Storage / integrity

class CertificateIssuanceFailed(EngineError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "CERTIFICATE_ISSUANCE_FAILED"
    default_detail = "Could not allocate a unique certificate number."

class PersistenceError(EngineError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "PERSISTENCE_ERROR"
    default_detail = "The change could not be saved. It is safe to retry."

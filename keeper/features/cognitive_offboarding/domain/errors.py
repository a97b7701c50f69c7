"""
Error taxonomy for the cognitive offboarding workflow.

Phase errors wrap the upstream collaborator message. PermissionDeniedError
never carries upstream detail: its message is fixed so repository and space
names cannot leak to end users.
"""

GENERIC_PERMISSION_MESSAGE = (
    "Access denied. You do not have sufficient permissions to perform this action."
)


class OffboardingError(Exception):
    """Base exception for cognitive offboarding operations."""

    code = "OFFBOARDING_ERROR"

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.session_id = session_id
        self.recoverable = recoverable


class ValidationError(OffboardingError):
    """Missing or malformed required input (e.g. empty employee id)."""

    code = "VALIDATION_ERROR"


class SessionNotFoundError(OffboardingError):
    code = "SESSION_NOT_FOUND"


class PhaseOrderError(OffboardingError):
    """A phase was requested while the session was not in its required state."""

    code = "PHASE_ORDER_ERROR"


class ScanError(OffboardingError):
    code = "SCAN_FAILED"


class InterviewError(OffboardingError):
    code = "INTERVIEW_FAILED"


class ArchiveError(OffboardingError):
    code = "ARCHIVE_FAILED"


class PermissionDeniedError(OffboardingError):
    """
    A collaborator refused access.

    Never retried. The user-facing message is always the generic one; ``service``
    only names which collaborator refused (jira, bitbucket, confluence).
    """

    code = "PERMISSION_DENIED"

    def __init__(self, service: str, session_id: str | None = None):
        super().__init__(GENERIC_PERMISSION_MESSAGE, session_id=session_id, recoverable=False)
        self.service = service


class ArtifactServiceError(Exception):
    """Custom exception for Jira / Bitbucket / Confluence API errors."""

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.service = service
        self.status_code = status_code
        self.response_data = response_data or {}

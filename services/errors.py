"""Error taxonomy for image intake, remote analysis and the session workflow."""

from enum import Enum


class FailureReason(str, Enum):
    """Distinguishing cause of an analysis failure, recorded for diagnostics only."""

    TRANSPORT = "transport"
    AUTHENTICATION = "authentication"
    RATE_LIMITED = "rate_limited"
    SERVICE = "service"
    MALFORMED = "malformed"
    DECLINED = "declined"


class IntakeError(ValueError):
    """Raised when an uploaded file cannot be accepted as an image."""


class AnalysisError(RuntimeError):
    """Raised when the remote model cannot produce a complete verdict."""

    def __init__(self, message: str, reason: FailureReason = FailureReason.SERVICE) -> None:
        super().__init__(message)
        self.reason = reason


class WorkflowBusyError(RuntimeError):
    """Raised when an image is selected while the session is not idle."""

    def __init__(self, state) -> None:
        super().__init__(
            f"An image can only be selected while the session is idle (current state: {state.value}). "
            "Reset the session first."
        )
        self.state = state

"""
Exceptions for the Polymer SDK.
"""
from typing import Any, Optional


class PolymerError(Exception):
    """Base exception for all Polymer SDK errors."""
    pass


class InvalidArgumentError(PolymerError, ValueError):
    """Raised when the caller supplies missing or contradictory parameters."""
    pass


class TransportError(PolymerError):
    """Raised when the HTTP round trip fails or the body cannot be parsed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RemoteError(PolymerError):
    """Raised when the proof service answers with a JSON-RPC error object."""

    def __init__(self, message: str, error: Any = None):
        self.error = error
        super().__init__(message)


class EventNotFoundError(PolymerError):
    """Raised when no log in the receipt matches the requested event."""

    def __init__(self, event_signature: str):
        self.event_signature = event_signature
        super().__init__(f"Event {event_signature} not found in transaction receipt")


class ChainIdUnavailableError(PolymerError):
    """Raised when the source chain id cannot be determined."""
    pass


class ProofFailedError(PolymerError):
    """Raised when the proof service reports a terminal failure for a job."""

    def __init__(self, reason: str, job_id: Optional[str] = None):
        self.reason = reason
        self.job_id = job_id
        super().__init__(f"Proof generation failed: {reason}")


class ProofTimeoutError(PolymerError):
    """Raised when polling runs out of attempts without a terminal status."""

    def __init__(self, attempts: int, elapsed: float, job_id: Optional[str] = None):
        self.attempts = attempts
        self.elapsed = elapsed
        self.job_id = job_id
        super().__init__(
            f"Proof generation timed out after {attempts} attempts ({elapsed:.1f}s)"
        )


class ProofCancelledError(PolymerError):
    """Raised when polling is cancelled before reaching a terminal status."""

    def __init__(self, attempts: int, job_id: Optional[str] = None):
        self.attempts = attempts
        self.job_id = job_id
        super().__init__(f"Proof polling cancelled after {attempts} attempts")

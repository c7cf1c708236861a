"""Error taxonomy of the offer sync engine.

Every failure an import can hit maps to one ErrorKind (what went wrong) and
one SyncStage (where). The engine turns these into failed SyncResults; the
HTTP layer maps kinds to status codes.
"""

from enum import Enum


class ErrorKind(Enum):
    """Machine-readable failure kind."""

    INVALID_IDENTIFIER = "invalid_identifier"
    INVALID_DOMAIN = "invalid_domain"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_REJECTED = "upstream_rejected"
    UPSTREAM_MALFORMED = "upstream_malformed"
    PERSISTENCE_FAILURE = "persistence_failure"
    SYNC_IN_PROGRESS = "sync_in_progress"


class SyncStage(Enum):
    """Step of an import that failed."""

    EXTRACTION = "extraction"
    LOCK = "lock"
    EXISTENCE_CHECK = "existence_check"
    FETCH = "fetch"
    PERSISTENCE = "persistence"


class SyncError(RuntimeError):
    """Base class for expected sync failures."""

    kind: ErrorKind
    stage: SyncStage

    def __init__(self, message: str, *, stage: SyncStage | None = None) -> None:
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage


class InvalidIdentifierError(SyncError):
    kind = ErrorKind.INVALID_IDENTIFIER
    stage = SyncStage.EXTRACTION


class InvalidDomainError(SyncError):
    kind = ErrorKind.INVALID_DOMAIN
    stage = SyncStage.EXTRACTION


class UpstreamUnavailableError(SyncError):
    kind = ErrorKind.UPSTREAM_UNAVAILABLE
    stage = SyncStage.FETCH


class UpstreamRejectedError(SyncError):
    """Provider answered with a non-200 status."""

    kind = ErrorKind.UPSTREAM_REJECTED
    stage = SyncStage.FETCH

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Mobgran API returned status {status_code}")
        self.status_code = status_code
        # Kept for diagnostics/logs only; never shown to API clients
        self.body = body


class UpstreamMalformedError(SyncError):
    kind = ErrorKind.UPSTREAM_MALFORMED
    stage = SyncStage.FETCH


class PersistenceError(SyncError):
    kind = ErrorKind.PERSISTENCE_FAILURE
    stage = SyncStage.PERSISTENCE


class SyncInProgressError(SyncError):
    """Another import of the same offer held the lock for too long."""

    kind = ErrorKind.SYNC_IN_PROGRESS
    stage = SyncStage.LOCK

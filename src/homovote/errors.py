"""Error kinds raised by the voting core.

Every failure is a single exception type, `VotingError`, tagged with one
member of the closed `ErrorKind` enumeration. Callers branch on `err.kind`
instead of on exception subclasses.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    VOTER_NOT_FOUND = "voter not found"
    INVALID_CHOICE = "invalid choice"
    ALREADY_VOTED = "ballot already cast"
    BALLOT_NOT_FOUND = "ballot not found"
    INVALID_ELECTION = "invalid election"
    INVALID_PARAMETERS = "invalid cryptographic parameters"
    TALLY_NOT_ALLOWED = "tally not allowed"
    ENCRYPTION_ERROR = "encryption failed"
    DECRYPTION_ERROR = "decryption failed"
    DUPLICATE_VOTER = "voter already registered"


class VotingError(Exception):
    """Recoverable voting/crypto failure

    Attributes
    - kind: the ErrorKind tag
    - detail: optional human readable context
    """

    def __init__(self, kind: ErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        msg = kind.value if not detail else f"{kind.value}: {detail}"
        super().__init__(msg)

"""
Governance Errors and Results

Every rejected governance call is described by one ``ErrorKind``. Inside
the package a failed precondition is raised as the matching
``GovernanceError`` subclass; the engine boundary converts it into a
``Result`` so that callers never have to catch anything.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional, Type

from ..exceptions import CharityDAOException


# ══════════════════════════════════════════════════════════════════════
#  ERROR KINDS
# ══════════════════════════════════════════════════════════════════════

class ErrorKind(IntEnum):
    """Closed set of rejection reasons, numbered as on the wire."""
    NOT_AUTHORIZED = 100
    PROPOSAL_NOT_FOUND = 101
    PROPOSAL_INACTIVE = 102
    ALREADY_VOTED = 104
    VOTING_CLOSED = 105
    INVALID_VOTE_AMOUNT = 106
    CALCULATION_ERROR = 108
    INVALID_PROPOSAL_ID = 110
    TREASURY_FAIL = 114
    INVALID_THRESHOLD = 116
    ALREADY_EXECUTED = 117
    MAX_PROPOSALS_EXCEEDED = 119
    INVALID_DURATION = 120
    INVALID_AMOUNT = 124
    THRESHOLD_NOT_MET = 126


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class GovernanceError(CharityDAOException):
    """Base governance exception. Subclasses pin ``kind``."""
    kind: ErrorKind


class NotAuthorizedError(GovernanceError):
    """Caller is not the governing authority."""
    kind = ErrorKind.NOT_AUTHORIZED


class ProposalNotFoundError(GovernanceError):
    """No proposal is stored under the given id."""
    kind = ErrorKind.PROPOSAL_NOT_FOUND


class InvalidProposalIdError(GovernanceError):
    """Proposal id is not below the proposal counter."""
    kind = ErrorKind.INVALID_PROPOSAL_ID


class ProposalInactiveError(GovernanceError):
    """Proposal is outside its voting window or already executed."""
    kind = ErrorKind.PROPOSAL_INACTIVE


class AlreadyVotedError(GovernanceError):
    """Caller already cast a vote on this proposal."""
    kind = ErrorKind.ALREADY_VOTED


class InvalidVoteAmountError(GovernanceError):
    """Vote amount is below the minimum or not positive."""
    kind = ErrorKind.INVALID_VOTE_AMOUNT


class CalculationError(GovernanceError):
    """Vote amount is not a perfect square."""
    kind = ErrorKind.CALCULATION_ERROR


class VotingClosedError(GovernanceError):
    """Execution attempted while the voting window is still open."""
    kind = ErrorKind.VOTING_CLOSED


class AlreadyExecutedError(GovernanceError):
    """Proposal has already been executed."""
    kind = ErrorKind.ALREADY_EXECUTED


class ThresholdNotMetError(GovernanceError):
    """Accumulated weight is below the voting threshold."""
    kind = ErrorKind.THRESHOLD_NOT_MET


class TreasuryError(GovernanceError):
    """Treasury refused to disburse the proposal amount."""
    kind = ErrorKind.TREASURY_FAIL


class InvalidThresholdError(GovernanceError):
    """Voting threshold outside the accepted range."""
    kind = ErrorKind.INVALID_THRESHOLD


class MaxProposalsExceededError(GovernanceError):
    """Proposal counter reached its cap."""
    kind = ErrorKind.MAX_PROPOSALS_EXCEEDED


class InvalidDurationError(GovernanceError):
    """Voting duration must be positive."""
    kind = ErrorKind.INVALID_DURATION


class InvalidAmountError(GovernanceError):
    """Requested proposal amount must be positive."""
    kind = ErrorKind.INVALID_AMOUNT


class StateInvariantError(CharityDAOException):
    """Stored governance state violates one of its invariants."""


_ERRORS_BY_KIND: Dict[ErrorKind, Type[GovernanceError]] = {
    cls.kind: cls for cls in GovernanceError.__subclasses__()
}


def error_for(kind: ErrorKind, message: str = "") -> GovernanceError:
    """Build the exception that corresponds to *kind*."""
    return _ERRORS_BY_KIND[kind](message or kind.name)


# ══════════════════════════════════════════════════════════════════════
#  RESULT
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Result:
    """
    Outcome of a governance call.

    On success ``value`` holds the operation's return value; on failure it
    holds the ``ErrorKind`` that rejected the call.
    """
    ok: bool
    value: Any

    @classmethod
    def success(cls, value: Any = True) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind) -> "Result":
        return cls(ok=False, value=ErrorKind(kind))

    @property
    def error(self) -> Optional[ErrorKind]:
        return None if self.ok else self.value

    def unwrap(self) -> Any:
        """Return the success value or raise the matching GovernanceError."""
        if self.ok:
            return self.value
        raise error_for(self.value)

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "value": self.value}
        return {"ok": False, "error": self.value.name, "code": int(self.value)}

"""
Proposal Lifecycle

Scheduled → Active → Closed → Executed, driven by three operations:
create, vote and execute.

The phase is never stored. It is derived from the block height of the call
and the proposal's window and ``executed`` flag every time it is needed,
because the height moves between calls without the proposal changing.

Each operation checks its preconditions in a fixed order and raises the
first one that fails before anything is written, then commits all of its
effects through ``GovernanceState``.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional

from ..constants import GOVERNANCE_VOTING_START_DELAY
from ..logger import get_logger
from .errors import (
    AlreadyExecutedError,
    AlreadyVotedError,
    InvalidAmountError,
    InvalidDurationError,
    InvalidProposalIdError,
    InvalidVoteAmountError,
    MaxProposalsExceededError,
    ProposalInactiveError,
    ProposalNotFoundError,
    ThresholdNotMetError,
    TreasuryError,
    VotingClosedError,
)
from .quadratic import compute_weight
from .state import GovernanceState, Proposal

logger = get_logger(__name__)

# Callable(proposal_id, proposal) → bool, True when funds were released
DisburseFn = Callable[[int, Proposal], bool]


# ══════════════════════════════════════════════════════════════════════
#  CALL CONTEXT
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CallContext:
    """
    Ambient facts supplied by the runtime for a single call.

    Attributes:
        caller:        Identity invoking the operation
        block_height:  Current value of the monotonic time counter
    """
    caller: str
    block_height: int


# ══════════════════════════════════════════════════════════════════════
#  PHASES
# ══════════════════════════════════════════════════════════════════════

class ProposalPhase(IntEnum):
    """Derived lifecycle stage of a proposal."""
    SCHEDULED = 0   # Voting has not opened yet
    ACTIVE = 1      # Inside the inclusive voting window
    CLOSED = 2      # Window passed, awaiting execution
    EXECUTED = 3    # Terminal


def proposal_phase(proposal: Proposal, now: int) -> ProposalPhase:
    """Phase of *proposal* at block height *now*."""
    if proposal.executed:
        return ProposalPhase.EXECUTED
    if now < proposal.start_time:
        return ProposalPhase.SCHEDULED
    if now <= proposal.end_time:
        return ProposalPhase.ACTIVE
    return ProposalPhase.CLOSED


# ══════════════════════════════════════════════════════════════════════
#  LIFECYCLE OPERATIONS
# ══════════════════════════════════════════════════════════════════════

class ProposalLifecycle:
    """
    The three proposal-mutating operations.

    Args:
        state:        Governance state to read and commit to
        disburse_fn:  Optional treasury hook consulted before execution commits
    """

    def __init__(self, state: GovernanceState, disburse_fn: Optional[DisburseFn] = None):
        self.state = state
        self._disburse = disburse_fn

    # ── Create ────────────────────────────────────────────────────────

    def create(self, ctx: CallContext, charity_id: int, amount: int, duration: int) -> int:
        """
        Open a new proposal. Voting starts one block after creation.

        Returns the new proposal id.
        """
        cfg = self.state.config
        if cfg.next_proposal_id >= cfg.max_proposals:
            raise MaxProposalsExceededError(
                f"Proposal cap {cfg.max_proposals} reached"
            )
        if duration <= 0:
            raise InvalidDurationError(f"Duration must be positive, got {duration}")
        if amount <= 0:
            raise InvalidAmountError(f"Amount must be positive, got {amount}")

        start_time = ctx.block_height + GOVERNANCE_VOTING_START_DELAY
        end_time = start_time + duration
        proposal_id = self.state.add_proposal(
            charity_id=charity_id,
            amount=amount,
            start_time=start_time,
            end_time=end_time,
            proposer=ctx.caller,
        )
        logger.info(
            f"Proposal #{proposal_id} created by {ctx.caller}: charity={charity_id} "
            f"amount={amount} window=[{start_time}, {end_time}]"
        )
        return proposal_id

    # ── Vote ──────────────────────────────────────────────────────────

    def vote(self, ctx: CallContext, proposal_id: int, amount: int) -> bool:
        """Cast the caller's one and only quadratic vote on a proposal."""
        proposal = self.state.get_proposal(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(f"Proposal #{proposal_id} not found")
        # Implied by the lookup above while ids and counter stay consistent
        if proposal_id >= self.state.config.next_proposal_id:
            raise InvalidProposalIdError(f"Proposal id {proposal_id} was never issued")
        if proposal_phase(proposal, ctx.block_height) != ProposalPhase.ACTIVE:
            raise ProposalInactiveError(
                f"Proposal #{proposal_id} is not accepting votes at height "
                f"{ctx.block_height} (window=[{proposal.start_time}, {proposal.end_time}], "
                f"executed={proposal.executed})"
            )
        if self.state.get_vote(proposal_id, ctx.caller) is not None:
            raise AlreadyVotedError(f"{ctx.caller} already voted on proposal #{proposal_id}")
        # Non-integers fall through to compute_weight
        if isinstance(amount, int) and (amount < self.state.config.min_vote_amount or amount <= 0):
            raise InvalidVoteAmountError(
                f"Vote amount {amount} below minimum {self.state.config.min_vote_amount}"
            )
        weight = compute_weight(amount)

        updated = self.state.record_vote(proposal_id, ctx.caller, amount, weight)
        logger.info(
            f"Vote: {ctx.caller} → proposal #{proposal_id} "
            f"(amount={amount}, weight={weight}, total={updated.total_votes})"
        )
        return True

    # ── Execute ───────────────────────────────────────────────────────

    def execute(self, ctx: CallContext, proposal_id: int) -> Proposal:
        """
        Execute a closed proposal whose tally meets the threshold.

        Returns the executed proposal record.
        """
        proposal = self.state.get_proposal(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(f"Proposal #{proposal_id} not found")
        if ctx.block_height <= proposal.end_time:
            raise VotingClosedError(
                f"Proposal #{proposal_id} cannot execute before height "
                f"{proposal.end_time + 1} (now={ctx.block_height})"
            )
        if proposal.executed:
            raise AlreadyExecutedError(f"Proposal #{proposal_id} already executed")
        threshold = self.state.config.voting_threshold
        if proposal.total_votes < threshold:
            raise ThresholdNotMetError(
                f"Proposal #{proposal_id} has {proposal.total_votes} votes, "
                f"threshold is {threshold}"
            )
        if self._disburse is not None and not self._disburse(proposal_id, proposal):
            raise TreasuryError(
                f"Treasury refused {proposal.amount} for charity {proposal.charity_id}"
            )

        executed = self.state.mark_executed(proposal_id)
        logger.info(
            f"Proposal #{proposal_id} EXECUTED by {ctx.caller}: "
            f"charity={executed.charity_id} amount={executed.amount} "
            f"votes={executed.total_votes}"
        )
        return executed

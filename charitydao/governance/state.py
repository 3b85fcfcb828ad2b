"""
Governance State

In-memory container for everything the governance engine remembers:
proposals, votes, per-proposal voter lists, the active-status mirror and
the configuration record.

Records are frozen dataclasses. A mutation stores a fresh record built with
``dataclasses.replace`` so lookups can hand out the stored object without
exposing anything that could be changed behind the container's back.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from ..constants import (
    GOVERNANCE_DEFAULT_AUTHORITY,
    GOVERNANCE_MAX_PROPOSALS,
    GOVERNANCE_MIN_VOTE_AMOUNT,
    GOVERNANCE_THRESHOLD_MAX,
    GOVERNANCE_THRESHOLD_MIN,
    GOVERNANCE_VOTING_THRESHOLD,
)
from ..exceptions import ConfigurationError
from .errors import (
    AlreadyExecutedError,
    AlreadyVotedError,
    ProposalNotFoundError,
    StateInvariantError,
)


# ══════════════════════════════════════════════════════════════════════
#  RECORDS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Proposal:
    """
    A request to disburse ``amount`` to ``charity_id``.

    Fields:
        charity_id:  Opaque charity identifier (validated externally)
        amount:      Requested value
        start_time:  First block height at which voting is open
        end_time:    Last block height at which voting is open
        proposer:    Identity that created the proposal
        total_votes: Sum of quadratic weights of all recorded votes
        executed:    Set once, by execution
    """
    charity_id: int
    amount: int
    start_time: int
    end_time: int
    proposer: str
    total_votes: int = 0
    executed: bool = False

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "charityId": self.charity_id,
            "amount": self.amount,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "totalVotes": self.total_votes,
            "executed": self.executed,
            "proposer": self.proposer,
        }


@dataclass(frozen=True)
class VoteRecord:
    """One identity's ballot on one proposal."""
    vote_amount: int
    quadratic_weight: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "voteAmount": self.vote_amount,
            "quadraticWeight": self.quadratic_weight,
        }


@dataclass(frozen=True)
class GovernanceConfig:
    """
    Process-wide governance parameters.

    ``next_proposal_id`` doubles as the number of proposals ever created.
    """
    next_proposal_id: int = 0
    max_proposals: int = GOVERNANCE_MAX_PROPOSALS
    voting_threshold: int = GOVERNANCE_VOTING_THRESHOLD
    min_vote_amount: int = GOVERNANCE_MIN_VOTE_AMOUNT
    staking_authority: str = GOVERNANCE_DEFAULT_AUTHORITY
    governing_authority: str = GOVERNANCE_DEFAULT_AUTHORITY
    charity_registry_authority: str = GOVERNANCE_DEFAULT_AUTHORITY

    def __post_init__(self):
        problem = config_problem(self)
        if problem:
            raise ConfigurationError(problem)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nextProposalId": self.next_proposal_id,
            "maxProposals": self.max_proposals,
            "votingThreshold": self.voting_threshold,
            "minVoteAmount": self.min_vote_amount,
            "stakingAuthority": self.staking_authority,
            "governingAuthority": self.governing_authority,
            "charityRegistryAuthority": self.charity_registry_authority,
        }


def config_problem(cfg: GovernanceConfig) -> Optional[str]:
    """Describe the first out-of-range parameter of *cfg*, or None."""
    if cfg.max_proposals < 1:
        return f"max_proposals must be >= 1, got {cfg.max_proposals}"
    if not GOVERNANCE_THRESHOLD_MIN <= cfg.voting_threshold <= GOVERNANCE_THRESHOLD_MAX:
        return (
            f"voting_threshold must be in [{GOVERNANCE_THRESHOLD_MIN}, "
            f"{GOVERNANCE_THRESHOLD_MAX}], got {cfg.voting_threshold}"
        )
    if cfg.min_vote_amount <= 0:
        return f"min_vote_amount must be > 0, got {cfg.min_vote_amount}"
    return None


# Fields the governing authority may replace through a setter
MUTABLE_CONFIG_FIELDS = frozenset({
    "voting_threshold",
    "min_vote_amount",
    "staking_authority",
    "governing_authority",
    "charity_registry_authority",
})


# ══════════════════════════════════════════════════════════════════════
#  STATE CONTAINER
# ══════════════════════════════════════════════════════════════════════

class GovernanceState:
    """
    Exclusive owner of all governance records.

    Mutations assume the caller has already validated the request; each one
    still checks the facts it depends on before writing, and writes nothing
    if a check fails.
    """

    def __init__(self, config: Optional[GovernanceConfig] = None):
        self._config: GovernanceConfig = config or GovernanceConfig()
        self._proposals: Dict[int, Proposal] = {}
        self._votes: Dict[Tuple[int, str], VoteRecord] = {}
        self._voters: Dict[int, List[str]] = {}
        self._status: Dict[int, bool] = {}

    # ── Lookups ───────────────────────────────────────────────────────

    @property
    def config(self) -> GovernanceConfig:
        return self._config

    def get_proposal(self, proposal_id: int) -> Optional[Proposal]:
        return self._proposals.get(proposal_id)

    def get_vote(self, proposal_id: int, voter: str) -> Optional[VoteRecord]:
        return self._votes.get((proposal_id, voter))

    def get_voters(self, proposal_id: int) -> Optional[List[str]]:
        voters = self._voters.get(proposal_id)
        return list(voters) if voters is not None else None

    def get_status(self, proposal_id: int) -> Optional[bool]:
        return self._status.get(proposal_id)

    def proposal_ids(self) -> List[int]:
        return sorted(self._proposals)

    # ── Mutations ─────────────────────────────────────────────────────

    def add_proposal(
        self,
        charity_id: int,
        amount: int,
        start_time: int,
        end_time: int,
        proposer: str,
    ) -> int:
        """Store a new proposal under the next id and advance the counter."""
        proposal_id = self._config.next_proposal_id
        if proposal_id in self._proposals:
            raise StateInvariantError(f"Proposal #{proposal_id} already stored")

        self._proposals[proposal_id] = Proposal(
            charity_id=charity_id,
            amount=amount,
            start_time=start_time,
            end_time=end_time,
            proposer=proposer,
        )
        self._status[proposal_id] = True
        self._config = replace(self._config, next_proposal_id=proposal_id + 1)
        return proposal_id

    def record_vote(self, proposal_id: int, voter: str, amount: int, weight: int) -> Proposal:
        """Record a ballot, add its weight to the tally, append the voter."""
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(f"Proposal #{proposal_id} not found")
        if (proposal_id, voter) in self._votes:
            raise AlreadyVotedError(f"{voter} already voted on proposal #{proposal_id}")

        updated = replace(proposal, total_votes=proposal.total_votes + weight)
        self._votes[(proposal_id, voter)] = VoteRecord(vote_amount=amount, quadratic_weight=weight)
        self._proposals[proposal_id] = updated
        self._voters.setdefault(proposal_id, []).append(voter)
        return updated

    def mark_executed(self, proposal_id: int) -> Proposal:
        """Flip ``executed`` and clear the active status together."""
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(f"Proposal #{proposal_id} not found")
        if proposal.executed:
            raise AlreadyExecutedError(f"Proposal #{proposal_id} already executed")

        updated = replace(proposal, executed=True)
        self._proposals[proposal_id] = updated
        self._status[proposal_id] = False
        return updated

    def update_config(self, field_name: str, value: Any) -> GovernanceConfig:
        """Replace a single tunable configuration field."""
        if field_name not in MUTABLE_CONFIG_FIELDS:
            raise KeyError(f"Configuration field '{field_name}' is not mutable")
        self._config = replace(self._config, **{field_name: value})
        return self._config

    # ── Invariants ────────────────────────────────────────────────────

    def check_invariants(self) -> bool:
        """
        Verify the consistency of every stored record.

        Raises StateInvariantError on the first violation found.
        """
        cfg = self._config
        problem = config_problem(cfg)
        if problem:
            raise StateInvariantError(problem)
        if cfg.next_proposal_id > cfg.max_proposals:
            raise StateInvariantError(
                f"Proposal counter {cfg.next_proposal_id} exceeds cap {cfg.max_proposals}"
            )
        if set(self._proposals) != set(range(cfg.next_proposal_id)):
            raise StateInvariantError("Stored proposal ids do not match the proposal counter")

        weights: Dict[int, int] = {}
        keys_by_proposal: Dict[int, set] = {}
        for (pid, voter), vote in self._votes.items():
            if vote.quadratic_weight * vote.quadratic_weight != vote.vote_amount:
                raise StateInvariantError(f"Vote by {voter} on #{pid} has an inexact weight")
            weights[pid] = weights.get(pid, 0) + vote.quadratic_weight
            keys_by_proposal.setdefault(pid, set()).add(voter)

        for pid, proposal in self._proposals.items():
            if proposal.end_time <= proposal.start_time:
                raise StateInvariantError(f"Proposal #{pid} has an empty voting window")
            if proposal.total_votes != weights.get(pid, 0):
                raise StateInvariantError(
                    f"Proposal #{pid} total {proposal.total_votes} != "
                    f"summed weights {weights.get(pid, 0)}"
                )
            voters = self._voters.get(pid, [])
            if len(voters) != len(set(voters)) or set(voters) != keys_by_proposal.get(pid, set()):
                raise StateInvariantError(f"Voter list of proposal #{pid} does not match its votes")
            if self._status.get(pid) is not (not proposal.executed):
                raise StateInvariantError(f"Status of proposal #{pid} is out of sync")

        if set(keys_by_proposal) - set(self._proposals):
            raise StateInvariantError("Votes recorded against unknown proposals")
        return True

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self._config.to_dict(),
            "proposals": {pid: p.to_dict() for pid, p in self._proposals.items()},
            "votes": {
                f"{pid}-{voter}": v.to_dict() for (pid, voter), v in self._votes.items()
            },
            "proposalVoters": {pid: list(v) for pid, v in self._voters.items()},
            "proposalStatus": dict(self._status),
        }

    def __repr__(self) -> str:
        return (
            f"<GovernanceState proposals={len(self._proposals)} "
            f"votes={len(self._votes)}>"
        )

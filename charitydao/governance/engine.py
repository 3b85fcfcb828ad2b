"""
Quadratic Governance Engine

Single entry point for the governance surface: proposal lifecycle calls,
privileged configuration setters and read-only queries.

Mutating calls take a ``CallContext`` (caller identity and block height)
and return a ``Result``. A rejected call reports the first failed
precondition and leaves the state untouched. Queries never fail; they
return the stored value or an empty default.
"""

from typing import Any, Callable, Dict, List, Optional

from ..logger import LogManager, get_logger
from .authorization import AuthorizationGuard, ConfigurationManager
from .errors import GovernanceError, Result
from .lifecycle import CallContext, DisburseFn, ProposalLifecycle, ProposalPhase, proposal_phase
from .state import GovernanceConfig, GovernanceState, Proposal, VoteRecord

logger = get_logger(__name__)


class GovernanceEngine:
    """
    Quadratic-voting governance over charity spending proposals.

    Args:
        config:       Initial configuration record (defaults from constants)
        disburse_fn:  Optional treasury hook, Callable(proposal_id, proposal) → bool
    """

    def __init__(
        self,
        config: Optional[GovernanceConfig] = None,
        disburse_fn: Optional[DisburseFn] = None,
    ):
        self.state = GovernanceState(config)
        self.lifecycle = ProposalLifecycle(self.state, disburse_fn)
        self.guard = AuthorizationGuard(self.state)
        self.config_manager = ConfigurationManager(self.state, self.guard)
        self._execution_log: List[Dict[str, Any]] = []

    @classmethod
    def from_settings(cls, settings=None, disburse_fn: Optional[DisburseFn] = None) -> "GovernanceEngine":
        """
        Build an engine from loaded settings (``load_config()`` if omitted).

        The settings' log level is applied to the process logger.
        """
        if settings is None:
            # Lazy import to avoid a cycle through charitydao.config
            from ..config import load_config
            settings = load_config()
        config = settings.to_governance_config()
        LogManager().set_level(settings.logging.level)
        return cls(config=config, disburse_fn=disburse_fn)

    # ── Call boundary ─────────────────────────────────────────────────

    def _call(self, operation: str, ctx: CallContext, fn: Callable[[], Any]) -> Result:
        try:
            value = fn()
        except GovernanceError as e:
            logger.warning(
                f"{operation} rejected for {ctx.caller} at height "
                f"{ctx.block_height}: {e.kind.name} ({e})"
            )
            return Result.failure(e.kind)
        return Result.success(value)

    # ── Proposal lifecycle ────────────────────────────────────────────

    def create_proposal(self, ctx: CallContext, charity_id: int, amount: int, duration: int) -> Result:
        """Result value: the new proposal id."""
        return self._call(
            "create_proposal", ctx,
            lambda: self.lifecycle.create(ctx, charity_id, amount, duration),
        )

    def vote_on_proposal(self, ctx: CallContext, proposal_id: int, amount: int) -> Result:
        return self._call(
            "vote_on_proposal", ctx,
            lambda: self.lifecycle.vote(ctx, proposal_id, amount),
        )

    def execute_proposal(self, ctx: CallContext, proposal_id: int) -> Result:
        def run() -> bool:
            executed = self.lifecycle.execute(ctx, proposal_id)
            self._execution_log.append({
                "proposalId": proposal_id,
                "charityId": executed.charity_id,
                "amount": executed.amount,
                "totalVotes": executed.total_votes,
                "executedAt": ctx.block_height,
            })
            return True

        return self._call("execute_proposal", ctx, run)

    # ── Privileged configuration ──────────────────────────────────────

    def set_voting_threshold(self, ctx: CallContext, new_threshold: int) -> Result:
        return self._call(
            "set_voting_threshold", ctx,
            lambda: self.config_manager.set_voting_threshold(ctx, new_threshold),
        )

    def set_min_vote_amount(self, ctx: CallContext, new_min: int) -> Result:
        return self._call(
            "set_min_vote_amount", ctx,
            lambda: self.config_manager.set_min_vote_amount(ctx, new_min),
        )

    def set_staking_authority(self, ctx: CallContext, identity: str) -> Result:
        return self._call(
            "set_staking_authority", ctx,
            lambda: self.config_manager.set_staking_authority(ctx, identity),
        )

    def set_governing_authority(self, ctx: CallContext, identity: str) -> Result:
        return self._call(
            "set_governing_authority", ctx,
            lambda: self.config_manager.set_governing_authority(ctx, identity),
        )

    def set_charity_registry_authority(self, ctx: CallContext, identity: str) -> Result:
        return self._call(
            "set_charity_registry_authority", ctx,
            lambda: self.config_manager.set_charity_registry_authority(ctx, identity),
        )

    # ── Queries ───────────────────────────────────────────────────────

    def get_proposal(self, proposal_id: int) -> Optional[Proposal]:
        return self.state.get_proposal(proposal_id)

    def get_vote(self, proposal_id: int, voter: str) -> Optional[VoteRecord]:
        return self.state.get_vote(proposal_id, voter)

    def get_proposal_voters(self, proposal_id: int) -> Optional[List[str]]:
        return self.state.get_voters(proposal_id)

    def get_proposal_status(self, proposal_id: int) -> Optional[bool]:
        return self.state.get_status(proposal_id)

    def get_next_proposal_id(self) -> int:
        return self.state.config.next_proposal_id

    def get_proposal_count(self) -> int:
        return self.state.config.next_proposal_id

    def get_voting_threshold(self) -> int:
        return self.state.config.voting_threshold

    def get_min_vote_amount(self) -> int:
        return self.state.config.min_vote_amount

    def get_max_proposals(self) -> int:
        return self.state.config.max_proposals

    def get_staking_authority(self) -> str:
        return self.state.config.staking_authority

    def get_governing_authority(self) -> str:
        return self.state.config.governing_authority

    def get_charity_registry_authority(self) -> str:
        return self.state.config.charity_registry_authority

    def get_total_votes(self, proposal_id: int) -> int:
        proposal = self.state.get_proposal(proposal_id)
        return proposal.total_votes if proposal else 0

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return self.state.get_vote(proposal_id, voter) is not None

    def get_quadratic_weight(self, proposal_id: int, voter: str) -> int:
        vote = self.state.get_vote(proposal_id, voter)
        return vote.quadratic_weight if vote else 0

    def is_proposal_active(self, proposal_id: int) -> bool:
        return bool(self.state.get_status(proposal_id))

    def get_proposal_phase(self, proposal_id: int, now: int) -> Optional[ProposalPhase]:
        proposal = self.state.get_proposal(proposal_id)
        return proposal_phase(proposal, now) if proposal else None

    @property
    def execution_log(self) -> List[Dict[str, Any]]:
        return list(self._execution_log)

    def execution_count(self) -> int:
        return len(self._execution_log)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.to_dict(),
            "executionLog": self.execution_log,
        }

    def __repr__(self) -> str:
        return (
            f"<GovernanceEngine proposals={self.get_proposal_count()} "
            f"executed={len(self._execution_log)}>"
        )

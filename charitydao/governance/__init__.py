"""
CharityDAO Quadratic Governance

Provides:
  - ErrorKind / Result / GovernanceError                     (errors.py)
  - compute_weight / try_compute_weight                       (quadratic.py)
  - Proposal / VoteRecord / GovernanceConfig / GovernanceState (state.py)
  - CallContext / ProposalPhase / ProposalLifecycle           (lifecycle.py)
  - AuthorizationGuard / ConfigurationManager                 (authorization.py)
  - GovernanceEngine                                          (engine.py)
"""

from .errors import (
    ErrorKind,
    GovernanceError,
    Result,
    StateInvariantError,
)
from .quadratic import (
    compute_weight,
    try_compute_weight,
    vote_cost,
)
from .state import (
    GovernanceConfig,
    GovernanceState,
    Proposal,
    VoteRecord,
)
from .lifecycle import (
    CallContext,
    ProposalLifecycle,
    ProposalPhase,
    proposal_phase,
)
from .authorization import (
    AuthorizationGuard,
    ConfigurationManager,
)
from .engine import GovernanceEngine

__all__ = [
    # Errors
    "ErrorKind",
    "GovernanceError",
    "Result",
    "StateInvariantError",
    # Weighting
    "compute_weight",
    "try_compute_weight",
    "vote_cost",
    # State
    "GovernanceConfig",
    "GovernanceState",
    "Proposal",
    "VoteRecord",
    # Lifecycle
    "CallContext",
    "ProposalLifecycle",
    "ProposalPhase",
    "proposal_phase",
    # Authorization
    "AuthorizationGuard",
    "ConfigurationManager",
    # Engine
    "GovernanceEngine",
]

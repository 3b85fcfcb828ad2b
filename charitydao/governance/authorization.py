"""
Authorization and Configuration Setters

Only the current governing authority may change governance parameters.
Replacing the governing authority itself goes through the same gate, so the
outgoing authority, not the incoming one, signs off on the handover.
"""

from typing import Any

from ..constants import GOVERNANCE_THRESHOLD_MAX, GOVERNANCE_THRESHOLD_MIN
from ..logger import get_logger
from .errors import InvalidThresholdError, InvalidVoteAmountError, NotAuthorizedError
from .lifecycle import CallContext
from .state import GovernanceState

logger = get_logger(__name__)


class AuthorizationGuard:
    """Predicate over the caller identity of a configuration change."""

    def __init__(self, state: GovernanceState):
        self.state = state

    def is_authorized(self, caller: str) -> bool:
        return caller == self.state.config.governing_authority

    def require(self, ctx: CallContext) -> None:
        if not self.is_authorized(ctx.caller):
            raise NotAuthorizedError(
                f"{ctx.caller} is not the governing authority"
            )


class ConfigurationManager:
    """The five privileged setters, each a single-field replace."""

    def __init__(self, state: GovernanceState, guard: AuthorizationGuard):
        self.state = state
        self.guard = guard

    def _replace(self, ctx: CallContext, field_name: str, value: Any) -> bool:
        old = getattr(self.state.config, field_name)
        self.state.update_config(field_name, value)
        logger.info(f"Config '{field_name}' changed by {ctx.caller}: {old} → {value}")
        return True

    def set_voting_threshold(self, ctx: CallContext, new_threshold: int) -> bool:
        self.guard.require(ctx)
        if not GOVERNANCE_THRESHOLD_MIN <= new_threshold <= GOVERNANCE_THRESHOLD_MAX:
            raise InvalidThresholdError(
                f"Threshold {new_threshold} outside "
                f"[{GOVERNANCE_THRESHOLD_MIN}, {GOVERNANCE_THRESHOLD_MAX}]"
            )
        return self._replace(ctx, "voting_threshold", new_threshold)

    def set_min_vote_amount(self, ctx: CallContext, new_min: int) -> bool:
        self.guard.require(ctx)
        if new_min <= 0:
            raise InvalidVoteAmountError(f"Minimum vote amount must be positive, got {new_min}")
        return self._replace(ctx, "min_vote_amount", new_min)

    def set_staking_authority(self, ctx: CallContext, identity: str) -> bool:
        self.guard.require(ctx)
        return self._replace(ctx, "staking_authority", identity)

    def set_governing_authority(self, ctx: CallContext, identity: str) -> bool:
        self.guard.require(ctx)
        return self._replace(ctx, "governing_authority", identity)

    def set_charity_registry_authority(self, ctx: CallContext, identity: str) -> bool:
        self.guard.require(ctx)
        return self._replace(ctx, "charity_registry_authority", identity)

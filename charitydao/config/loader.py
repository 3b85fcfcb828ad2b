"""
CharityDAO TOML Configuration Loader

Loads the initial governance parameters from a TOML file with environment
variable overrides (dataclass + from_dict + from_file).

Environment variable mapping:
    [governance] max_proposals      → CHARITYDAO_MAX_PROPOSALS
    [governance] voting_threshold   → CHARITYDAO_VOTING_THRESHOLD
    [governance] governing_authority → CHARITYDAO_GOVERNING_AUTHORITY
    ...

The values only seed a new engine. Once running, parameters change through
the governing authority's setters, never by reloading this file.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ..constants import (
    GOVERNANCE_DEFAULT_AUTHORITY,
    GOVERNANCE_MAX_PROPOSALS,
    GOVERNANCE_MIN_VOTE_AMOUNT,
    GOVERNANCE_THRESHOLD_MAX,
    GOVERNANCE_THRESHOLD_MIN,
    GOVERNANCE_VOTING_THRESHOLD,
)
from ..exceptions import ConfigurationError
from ..governance.state import GovernanceConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "charitydao.toml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class GovernanceSection:
    """[governance] section."""
    max_proposals: int = GOVERNANCE_MAX_PROPOSALS
    voting_threshold: int = GOVERNANCE_VOTING_THRESHOLD
    min_vote_amount: int = GOVERNANCE_MIN_VOTE_AMOUNT
    staking_authority: str = GOVERNANCE_DEFAULT_AUTHORITY
    governing_authority: str = GOVERNANCE_DEFAULT_AUTHORITY
    charity_registry_authority: str = GOVERNANCE_DEFAULT_AUTHORITY

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceSection":
        return cls(
            max_proposals=data.get("max_proposals", GOVERNANCE_MAX_PROPOSALS),
            voting_threshold=data.get("voting_threshold", GOVERNANCE_VOTING_THRESHOLD),
            min_vote_amount=data.get("min_vote_amount", GOVERNANCE_MIN_VOTE_AMOUNT),
            staking_authority=data.get("staking_authority", GOVERNANCE_DEFAULT_AUTHORITY),
            governing_authority=data.get("governing_authority", GOVERNANCE_DEFAULT_AUTHORITY),
            charity_registry_authority=data.get(
                "charity_registry_authority", GOVERNANCE_DEFAULT_AUTHORITY
            ),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("CHARITYDAO_MAX_PROPOSALS"):
            self.max_proposals = int(v)
        if v := os.environ.get("CHARITYDAO_VOTING_THRESHOLD"):
            self.voting_threshold = int(v)
        if v := os.environ.get("CHARITYDAO_MIN_VOTE_AMOUNT"):
            self.min_vote_amount = int(v)
        if v := os.environ.get("CHARITYDAO_STAKING_AUTHORITY"):
            self.staking_authority = v
        if v := os.environ.get("CHARITYDAO_GOVERNING_AUTHORITY"):
            self.governing_authority = v
        if v := os.environ.get("CHARITYDAO_CHARITY_REGISTRY_AUTHORITY"):
            self.charity_registry_authority = v

    def validate(self) -> None:
        if self.max_proposals < 1:
            raise ConfigurationError("max_proposals must be >= 1")
        if not GOVERNANCE_THRESHOLD_MIN <= self.voting_threshold <= GOVERNANCE_THRESHOLD_MAX:
            raise ConfigurationError(
                f"voting_threshold must be in [{GOVERNANCE_THRESHOLD_MIN}, "
                f"{GOVERNANCE_THRESHOLD_MAX}], got {self.voting_threshold}"
            )
        if self.min_vote_amount < 1:
            raise ConfigurationError("min_vote_amount must be >= 1")
        for name in ("staking_authority", "governing_authority", "charity_registry_authority"):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} must not be empty")


@dataclass
class LoggingSection:
    """[logging] section."""
    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSection":
        return cls(level=str(data.get("level", "INFO")).upper())

    def apply_env(self) -> None:
        if v := os.environ.get("CHARITYDAO_LOG_LEVEL"):
            self.level = v.upper()

    def validate(self) -> None:
        if self.level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.level}")


@dataclass
class GovernanceSettings:
    """
    Unified settings for a governance engine.

    Loads every section of the TOML file and applies environment variable
    overrides.
    """
    governance: GovernanceSection = field(default_factory=GovernanceSection)
    logging: LoggingSection = field(default_factory=LoggingSection)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceSettings":
        """Create settings from a parsed TOML dict."""
        return cls(
            governance=GovernanceSection.from_dict(data.get("governance", {})),
            logging=LoggingSection.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "GovernanceSettings":
        """
        Load settings from a TOML file.

        A missing file is not an error: defaults plus environment overrides
        are returned instead.
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            settings = cls()
            settings.apply_env()
            return settings

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed config file {config_path}: {e}") from e

        settings = cls.from_dict(raw)
        settings.apply_env()
        return settings

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.governance.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        self.governance.validate()
        self.logging.validate()
        return True

    # --- conversion -------------------------------------------------------

    def to_governance_config(self) -> GovernanceConfig:
        """Initial configuration record for a fresh engine."""
        self.validate()
        g = self.governance
        return GovernanceConfig(
            next_proposal_id=0,
            max_proposals=g.max_proposals,
            voting_threshold=g.voting_threshold,
            min_vote_amount=g.min_vote_amount,
            staking_authority=g.staking_authority,
            governing_authority=g.governing_authority,
            charity_registry_authority=g.charity_registry_authority,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        g = self.governance
        return {
            "governance": {
                "max_proposals": g.max_proposals,
                "voting_threshold": g.voting_threshold,
                "min_vote_amount": g.min_vote_amount,
                "staking_authority": g.staking_authority,
                "governing_authority": g.governing_authority,
                "charity_registry_authority": g.charity_registry_authority,
            },
            "logging": {
                "level": self.logging.level,
            },
        }


def load_config(path: Optional[str] = None) -> GovernanceSettings:
    """
    Load governance settings.

    Resolution order:
        1. Explicit *path* argument
        2. CHARITYDAO_CONFIG env var
        3. ./charitydao.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("CHARITYDAO_CONFIG", DEFAULT_CONFIG_FILE)

    return GovernanceSettings.from_file(path)

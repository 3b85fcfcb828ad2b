"""
CharityDAO Configuration

Loads the [governance] and [logging] sections of charitydao.toml.
Environment variables override TOML values.
"""

from .loader import (
    GovernanceSection,
    GovernanceSettings,
    LoggingSection,
    load_config,
)

__all__ = [
    "GovernanceSection",
    "GovernanceSettings",
    "LoggingSection",
    "load_config",
]

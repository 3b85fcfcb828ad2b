"""
CharityDAO

Quadratic-voting governance for charity spending proposals.
"""

from .governance import CallContext, ErrorKind, GovernanceEngine, Result

__version__ = "0.1.0"

__all__ = [
    "CallContext",
    "ErrorKind",
    "GovernanceEngine",
    "Result",
]

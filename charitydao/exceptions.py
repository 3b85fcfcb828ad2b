"""
CharityDAO Exceptions

Package-wide exception classes. Governance rejections live in
``charitydao.governance.errors`` and derive from ``CharityDAOException``.
"""


class CharityDAOException(Exception):
    """Base exception for CharityDAO."""
    pass


class ConfigurationError(CharityDAOException):
    """Configuration error."""
    pass

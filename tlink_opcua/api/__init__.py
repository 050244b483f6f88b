"""
TLINK cloud API access.

This package provides:
- HTTP client for token and listing endpoints
- Bearer credential management
"""

from .client import TlinkApiClient
from .credentials import CredentialManager

__all__ = [
    'TlinkApiClient',
    'CredentialManager',
]

"""
leiverify
=========
Client for the GLEIF Legal Entity Identifier registry: validate LEIs, score
how far a record can be trusted, search by name/country/BIC, and rebuild
parent/child ownership. All operations share one rate-limited transport.
"""

from .client import LEIClient
from .config import ClientConfig
from .core.contracts import RelationshipSet, ValidationResult

__all__ = [
    "LEIClient",
    "ClientConfig",
    "ValidationResult",
    "RelationshipSet",
]

__version__ = '0.1.0'

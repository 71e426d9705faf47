"""
Core exports for leiverify.
"""

from .contracts import (
    ERROR,
    NOT_FOUND,
    Address,
    CorroborationLevel,
    EntityStatus,
    FuzzyMatch,
    Registration,
    RegistrationStatus,
    RegistryRecord,
    RelationshipSet,
    ValidationResult,
)
from .interfaces import Limiter, Transport, Validator

__all__ = [
    "EntityStatus",
    "RegistrationStatus",
    "CorroborationLevel",
    "NOT_FOUND",
    "ERROR",
    "Address",
    "Registration",
    "RegistryRecord",
    "FuzzyMatch",
    "ValidationResult",
    "RelationshipSet",
    "Transport",
    "Limiter",
    "Validator",
]

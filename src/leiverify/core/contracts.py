from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class EntityStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class RegistrationStatus(str, Enum):
    ISSUED = "ISSUED"
    PENDING_VALIDATION = "PENDING_VALIDATION"
    PENDING_TRANSFER = "PENDING_TRANSFER"
    LAPSED = "LAPSED"
    MERGED = "MERGED"
    RETIRED = "RETIRED"


class CorroborationLevel(str, Enum):
    FULLY_CORROBORATED = "FULLY_CORROBORATED"
    PARTIALLY_CORROBORATED = "PARTIALLY_CORROBORATED"
    PENDING_CORROBORATION = "PENDING_CORROBORATION"


# Status strings for results that never reached a record.
NOT_FOUND = "NOT_FOUND"
ERROR = "ERROR"


@dataclass(frozen=True)
class Address:
    lines: List[str] = field(default_factory=list)
    city: str = ""
    region: str = ""
    country: str = ""
    postal_code: str = ""


@dataclass(frozen=True)
class Registration:
    """
    Registration block of a record. Dates are kept as the ISO strings the
    registry sends; statuses are raw strings (the registry may add values
    this client does not know about).
    """

    status: str
    initial_registration_date: str = ""
    last_update_date: str = ""
    next_renewal_date: Optional[str] = None
    managing_lou: str = ""
    corroboration_level: str = ""


@dataclass(frozen=True)
class RegistryRecord:
    lei: str
    legal_name: str
    entity_status: str
    registration: Registration
    other_names: List[str] = field(default_factory=list)
    legal_address: Address = field(default_factory=Address)
    headquarters_address: Address = field(default_factory=Address)
    jurisdiction: str = ""
    legal_form: str = ""
    expiration_date: Optional[str] = None
    expiration_reason: Optional[str] = None
    bic: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FuzzyMatch:
    lei: str
    match: str = ""
    score: Optional[float] = None


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one LEI. `valid=False` always carries
    `details=None` and `confidence=0.0`.
    """

    valid: bool
    lei: str
    entity_name: str = ""
    jurisdiction: str = ""
    status: str = ""
    registration_status: str = ""
    last_updated: str = ""
    confidence: float = 0.0
    details: Optional[RegistryRecord] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def not_found(cls, lei: str) -> "ValidationResult":
        return cls(
            valid=False,
            lei=lei,
            status=NOT_FOUND,
            registration_status=NOT_FOUND,
            warnings=["LEI not found in GLEIF database"],
        )

    @classmethod
    def error(cls, lei: str, message: str) -> "ValidationResult":
        return cls(
            valid=False,
            lei=lei,
            status=ERROR,
            registration_status=ERROR,
            warnings=[f"Validation error: {message}"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RelationshipSet:
    direct_parent: Optional[ValidationResult] = None
    ultimate_parent: Optional[ValidationResult] = None
    direct_children: List[ValidationResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direct_parent": (
                self.direct_parent.to_dict() if self.direct_parent else None
            ),
            "ultimate_parent": (
                self.ultimate_parent.to_dict() if self.ultimate_parent else None
            ),
            "direct_children": [c.to_dict() for c in self.direct_children],
        }

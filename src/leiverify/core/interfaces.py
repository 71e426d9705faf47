from __future__ import annotations

from typing import Dict, Optional, Protocol

from .contracts import ValidationResult


class Transport(Protocol):
    """
    One GET against the registry. Implementations must never raise; every
    failure is a TransportOutcome variant.
    """

    def fetch(
        self, path: str, query: Optional[Dict[str, str]] = None
    ): ...  # -> leiverify.gleif.http.TransportOutcome


class Limiter(Protocol):
    def acquire(self) -> None: ...


class Validator(Protocol):
    def validate(self, lei: str) -> ValidationResult: ...

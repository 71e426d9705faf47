from __future__ import annotations

import sys
from datetime import datetime
from typing import Callable, Optional

from requests.utils import quote

from ..core.contracts import RegistryRecord, ValidationResult
from ..core.interfaces import Limiter, Transport
from .http import NotFound, Success
from .parse import MalformedRecord, parse_record
from .scoring import score

RECORDS_PATH = "/lei-records"


def normalize_lei(lei: str) -> str:
    return (lei or "").strip().upper()


def result_from_record(
    record: RegistryRecord, now: Optional[datetime] = None
) -> ValidationResult:
    """Shape a parsed record into a valid, scored ValidationResult."""
    confidence, warnings = score(record, now=now)
    return ValidationResult(
        valid=True,
        lei=record.lei,
        entity_name=record.legal_name,
        jurisdiction=record.jurisdiction,
        status=record.entity_status,
        registration_status=record.registration.status,
        last_updated=record.registration.last_update_date,
        confidence=confidence,
        details=record,
        warnings=warnings,
    )


class RecordValidator:
    """
    Looks up a single LEI. `validate()` never raises: not-found, transport
    failures and malformed bodies all come back as `valid=False` results.
    """

    def __init__(
        self,
        transport: Transport,
        limiter: Limiter,
        *,
        now: Callable[[], Optional[datetime]] = lambda: None,
        debug: bool = False,
    ) -> None:
        self._transport = transport
        self._limiter = limiter
        self._now = now
        self._debug = bool(debug)

    def validate(self, lei: str) -> ValidationResult:
        lei = normalize_lei(lei)
        if not lei:
            return ValidationResult.error(lei, "empty LEI")

        self._limiter.acquire()
        outcome = self._transport.fetch(f"{RECORDS_PATH}/{quote(lei, safe='')}")

        if isinstance(outcome, NotFound):
            return ValidationResult.not_found(lei)
        if not isinstance(outcome, Success):
            if self._debug:
                print(
                    f"[validate] {lei}: {type(outcome).__name__} {outcome.message}",
                    file=sys.stderr,
                )
            return ValidationResult.error(lei, outcome.message)

        try:
            record = parse_record(outcome.body)
        except MalformedRecord as e:
            if self._debug:
                print(f"[validate] {lei}: malformed record: {e}", file=sys.stderr)
            return ValidationResult.error(lei, f"malformed response: {e}")
        return result_from_record(record, now=self._now())

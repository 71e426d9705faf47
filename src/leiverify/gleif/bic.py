from __future__ import annotations

import sys
from datetime import datetime
from typing import Callable, Optional

from ..core.contracts import ValidationResult
from ..core.interfaces import Limiter, Transport
from .http import Success
from .parse import MalformedRecord, parse_record_list
from .validate import RECORDS_PATH, result_from_record


class BICResolver:
    """
    BIC -> LEI via filter[bic]. Normal registry data maps a BIC to at most
    one record; if several come back the first is used without complaint.
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

    def find_by_bic(self, code: str) -> Optional[ValidationResult]:
        code = (code or "").strip().upper()
        if not code:
            return None

        self._limiter.acquire()
        outcome = self._transport.fetch(RECORDS_PATH, {"filter[bic]": code})
        if not isinstance(outcome, Success):
            if self._debug:
                print(f"[bic] {code}: {outcome.message}", file=sys.stderr)
            return None
        try:
            records, _ = parse_record_list(outcome.body)
        except MalformedRecord as e:
            if self._debug:
                print(f"[bic] {code}: malformed page: {e}", file=sys.stderr)
            return None

        if not records:
            return None
        if len(records) > 1 and self._debug:
            print(
                f"[bic] {code}: {len(records)} records, using {records[0].lei}",
                file=sys.stderr,
            )
        return result_from_record(records[0], now=self._now())

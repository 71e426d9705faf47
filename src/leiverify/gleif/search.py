from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..config import ClientConfig, clamp_page_size
from ..core.contracts import ValidationResult
from ..core.interfaces import Limiter, Transport, Validator
from .http import Success
from .parse import MalformedRecord, parse_fuzzy, parse_record_list, pretty_record
from .validate import RECORDS_PATH, result_from_record

FUZZY_PATH = "/fuzzycompletions"
FUZZY_FIELD = "entity.legalName"


class SearchEngine:
    """
    Three query shapes over the registry:

      A) exact legal name   filter[entity.legalName]=<name>
      B) fuzzy completions  /fuzzycompletions?field=entity.legalName&q=<text>
      C) country            filter[entity.legalAddress.country]=<cc>

    A and C are shaped straight from the embedded records. B only yields
    LEIs, so each one is resolved through the validator and its confidence
    capped at the registry's match score.

    No match and registry failure both come back as []; nothing raises.
    """

    def __init__(
        self,
        transport: Transport,
        limiter: Limiter,
        validator: Validator,
        config: Optional[ClientConfig] = None,
        *,
        now: Callable[[], Optional[datetime]] = lambda: None,
    ) -> None:
        self._transport = transport
        self._limiter = limiter
        self._validator = validator
        self._config = config or ClientConfig()
        self._now = now
        self._debug = self._config.debug

    # low-level ----------------------------------------------------------
    def _get(self, path: str, query: Dict[str, str], label: str):
        self._limiter.acquire()
        outcome = self._transport.fetch(path, query)
        if not isinstance(outcome, Success):
            if self._debug:
                print(
                    f"[search] {label}: {type(outcome).__name__} {getattr(outcome, 'message', '')}",
                    file=sys.stderr,
                )
            return None
        return outcome.body

    def _filtered(
        self, filter_key: str, value: str, limit: int, label: str
    ) -> List[ValidationResult]:
        size = clamp_page_size(limit)
        body = self._get(
            RECORDS_PATH,
            {f"filter[{filter_key}]": value, "page[size]": str(size)},
            label,
        )
        if body is None:
            return []
        try:
            records, skipped = parse_record_list(body)
        except MalformedRecord as e:
            if self._debug:
                print(f"[search] {label}: malformed page: {e}", file=sys.stderr)
            return []
        if self._debug:
            print(
                f"[search] {label}: {len(records)} records ({skipped} skipped)",
                file=sys.stderr,
            )
            if records:
                print(f"[search] first: {pretty_record(records[0])}", file=sys.stderr)
        now = self._now()
        return [result_from_record(r, now=now) for r in records[:size]]

    # public -------------------------------------------------------------
    def search_by_exact_name(
        self, name: str, limit: Optional[int] = None
    ) -> List[ValidationResult]:
        name = (name or "").strip()
        if not name:
            return []
        limit = limit or self._config.search_limit
        return self._filtered(
            "entity.legalName", name, limit, f"exact name={name!r}"
        )

    def search_by_country(
        self, country_code: str, limit: Optional[int] = None
    ) -> List[ValidationResult]:
        cc = (country_code or "").strip().upper()
        if not cc:
            return []
        limit = limit or self._config.country_limit
        return self._filtered(
            "entity.legalAddress.country", cc, limit, f"country={cc}"
        )

    def search_by_name(
        self, name: str, limit: Optional[int] = None
    ) -> List[ValidationResult]:
        """
        Fuzzy search. Returned confidence is never above the match score the
        registry reported for that LEI; LEIs that fail to validate are dropped.
        """
        name = (name or "").strip()
        if not name:
            return []
        limit = max(1, int(limit or self._config.fuzzy_limit))
        body = self._get(
            FUZZY_PATH, {"field": FUZZY_FIELD, "q": name}, f"fuzzy q={name!r}"
        )
        if body is None:
            return []
        try:
            matches = parse_fuzzy(body)
        except MalformedRecord as e:
            if self._debug:
                print(f"[search] fuzzy: malformed completions: {e}", file=sys.stderr)
            return []

        seen: set[str] = set()
        out: List[ValidationResult] = []
        for m in matches[:limit]:
            if m.lei in seen:
                continue
            seen.add(m.lei)
            res = self._validator.validate(m.lei)
            if not res.valid or res.details is None:
                continue
            if m.score is not None:
                res = replace(res, confidence=min(res.confidence, m.score))
            out.append(res)
        return out

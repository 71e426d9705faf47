from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ..config import ClientConfig, MAX_PAGE_SIZE
from ..core.contracts import RelationshipSet, ValidationResult
from ..core.interfaces import Limiter, Transport, Validator
from .http import Success
from .parse import MalformedRecord, resource_ids
from .validate import RECORDS_PATH, normalize_lei


class RelationshipResolver:
    """
    Parent/child ownership around one LEI.

      filter[owns]=<lei>     -> records that own <lei>    (parents)
      filter[ownedBy]=<lei>  -> records owned by <lei>    (children)

    The two lookups for the subject run in parallel; every LEI they
    surface is then validated one at a time through the shared limiter.
    The ultimate parent is found by walking filter[owns] upward from the
    direct parent until the chain ends, loops, or hits max_parent_depth.
    """

    def __init__(
        self,
        transport: Transport,
        limiter: Limiter,
        validator: Validator,
        config: Optional[ClientConfig] = None,
    ) -> None:
        self._transport = transport
        self._limiter = limiter
        self._validator = validator
        self._config = config or ClientConfig()
        self._debug = self._config.debug

    def _related(self, filter_key: str, lei: str, size: int) -> List[str]:
        """LEIs returned by one ownership filter; [] on any failure."""
        self._limiter.acquire()
        outcome = self._transport.fetch(
            RECORDS_PATH,
            {f"filter[{filter_key}]": lei, "page[size]": str(size)},
        )
        if not isinstance(outcome, Success):
            if self._debug:
                print(
                    f"[relationships] {filter_key}={lei}: {outcome.message}",
                    file=sys.stderr,
                )
            return []
        try:
            ids = resource_ids(outcome.body)
        except MalformedRecord as e:
            if self._debug:
                print(
                    f"[relationships] {filter_key}={lei}: malformed page: {e}",
                    file=sys.stderr,
                )
            return []
        return [x for x in ids if x != lei]

    def _ancestors(self, direct_parent: str, subject: str) -> List[str]:
        """Owners above the direct parent, nearest first."""
        seen = {subject, direct_parent}
        chain: List[str] = []
        current = direct_parent
        for _ in range(self._config.max_parent_depth):
            parents = self._related("owns", current, 1)
            if not parents or parents[0] in seen:
                break
            current = parents[0]
            seen.add(current)
            chain.append(current)
        return chain

    def _ultimate(
        self, direct_parent: ValidationResult, subject: str
    ) -> ValidationResult:
        # highest ancestor that validates; the direct parent if none does
        for lei in reversed(self._ancestors(direct_parent.lei, subject)):
            res = self._validator.validate(lei)
            if res.valid:
                return res
            if self._debug:
                print(
                    f"[relationships] ancestor {lei} skipped: {res.status}",
                    file=sys.stderr,
                )
        return direct_parent

    def resolve(self, lei: str) -> RelationshipSet:
        lei = normalize_lei(lei)
        subject = self._validator.validate(lei)
        if not subject.valid:
            return RelationshipSet()

        max_children = self._config.max_children
        with ThreadPoolExecutor(max_workers=2) as pool:
            parents_f = pool.submit(self._related, "owns", lei, 1)
            children_f = pool.submit(
                self._related,
                "ownedBy",
                lei,
                min(MAX_PAGE_SIZE, max_children),
            )
            parent_ids = parents_f.result()
            child_ids = children_f.result()

        direct_parent: Optional[ValidationResult] = None
        ultimate_parent: Optional[ValidationResult] = None
        if parent_ids:
            res = self._validator.validate(parent_ids[0])
            if res.valid:
                direct_parent = res
                ultimate_parent = self._ultimate(res, lei)

        children: List[ValidationResult] = []
        for child in child_ids[:max_children]:
            res = self._validator.validate(child)
            if res.valid:
                children.append(res)
            elif self._debug:
                print(
                    f"[relationships] child {child} skipped: {res.status}",
                    file=sys.stderr,
                )

        return RelationshipSet(
            direct_parent=direct_parent,
            ultimate_parent=ultimate_parent,
            direct_children=children,
        )

from __future__ import annotations

import sys
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional

from ..config import ClientConfig
from ..core.contracts import ValidationResult
from ..core.interfaces import Validator
from .validate import normalize_lei


def dedupe(leis: Iterable[str]) -> List[str]:
    """Drop exact repeats; first-seen order kept. Input strings are not altered."""
    seen: set[str] = set()
    out: List[str] = []
    for x in leis:
        if x not in seen:
            seen.add(x)
            out.append(x)
    return out


def group_by_lei(ids: List[str]) -> Dict[str, List[str]]:
    """Normalized LEI -> the caller's spellings of it, in input order."""
    groups: Dict[str, List[str]] = {}
    for raw in ids:
        groups.setdefault(normalize_lei(raw), []).append(raw)
    return groups


def chunked(items: List[str], size: int) -> List[List[str]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class BatchCoordinator:
    """
    Validates many LEIs in fixed-size chunks. Each chunk fans out over a
    thread pool; the next chunk starts only after every request of the
    current one has finished and the inter-chunk delay has elapsed.
    """

    def __init__(
        self,
        validator: Validator,
        config: Optional[ClientConfig] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._validator = validator
        self._config = config or ClientConfig()
        self._sleep = sleep
        self._debug = self._config.debug

    def _validate_one(self, lei: str) -> ValidationResult:
        try:
            return self._validator.validate(lei)
        except Exception as e:
            # a raising validator becomes an ERROR entry
            return ValidationResult.error(lei, f"{type(e).__name__}: {e}")

    def validate_batch(self, leis: Iterable[str]) -> Dict[str, ValidationResult]:
        # results are keyed by the caller's strings; spellings of the same
        # LEI share one lookup, and a blank entry comes back as an ERROR
        groups = group_by_lei(dedupe(leis))
        size = self._config.batch_size
        chunks = chunked(list(groups), size)
        results: Dict[str, ValidationResult] = {}
        if not chunks:
            return results

        with ThreadPoolExecutor(max_workers=size) as pool:
            for i, chunk in enumerate(chunks):
                done = list(zip(chunk, pool.map(self._validate_one, chunk)))
                for lei, res in done:
                    for raw in groups[lei]:
                        results[raw] = res
                if self._debug:
                    ok = sum(1 for _, res in done if res.valid)
                    print(
                        f"[batch] chunk {i + 1}/{len(chunks)}: {ok}/{len(chunk)} valid",
                        file=sys.stderr,
                    )
                if i + 1 < len(chunks):
                    self._sleep(self._config.batch_delay_s)
        return results

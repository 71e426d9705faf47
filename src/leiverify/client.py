from __future__ import annotations

from typing import Dict, Iterable, List, Optional

import requests

from .config import ClientConfig
from .core.contracts import RelationshipSet, ValidationResult
from .core.interfaces import Limiter, Transport
from .gleif.batch import BatchCoordinator
from .gleif.bic import BICResolver
from .gleif.http import RegistryTransport
from .gleif.ratelimit import RateLimiter
from .gleif.relationships import RelationshipResolver
from .gleif.search import SearchEngine
from .gleif.validate import RecordValidator


class LEIClient:
    """
    Public façade. Does not implement registry logic itself.
    Wires one transport and one rate limiter into every component so all
    operations draw from the same request quota.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        session: Optional[requests.Session] = None,
        transport: Optional[Transport] = None,
        limiter: Optional[Limiter] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._transport = transport or RegistryTransport(self.config, session)
        self._limiter = limiter or RateLimiter.from_config(self.config)
        debug = self.config.debug

        self._validator = RecordValidator(
            self._transport, self._limiter, debug=debug
        )
        self._search = SearchEngine(
            self._transport, self._limiter, self._validator, self.config
        )
        self._bic = BICResolver(self._transport, self._limiter, debug=debug)
        self._relationships = RelationshipResolver(
            self._transport, self._limiter, self._validator, self.config
        )
        self._batch = BatchCoordinator(self._validator, self.config)

    @property
    def limiter(self) -> Limiter:
        return self._limiter

    def validate(self, lei: str) -> ValidationResult:
        return self._validator.validate(lei)

    def search_by_exact_name(
        self, name: str, limit: Optional[int] = None
    ) -> List[ValidationResult]:
        return self._search.search_by_exact_name(name, limit)

    def search_by_name(
        self, name: str, limit: Optional[int] = None
    ) -> List[ValidationResult]:
        return self._search.search_by_name(name, limit)

    def search_by_country(
        self, country_code: str, limit: Optional[int] = None
    ) -> List[ValidationResult]:
        return self._search.search_by_country(country_code, limit)

    def find_by_bic(self, code: str) -> Optional[ValidationResult]:
        return self._bic.find_by_bic(code)

    def get_relationships(self, lei: str) -> RelationshipSet:
        return self._relationships.resolve(lei)

    def validate_batch(
        self, leis: Iterable[str]
    ) -> Dict[str, ValidationResult]:
        return self._batch.validate_batch(leis)

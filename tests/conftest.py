import os
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

# Load .env if present, but don't fail if it's missing.
try:
    from dotenv import load_dotenv

    load_dotenv()
except Exception:
    pass

from leiverify.config import ClientConfig
from leiverify.gleif.http import NotFound, Success

# ---- mode & env flags -------------------------------------------------------


def _truthy(s: str | None) -> bool:
    return str(s).strip().lower() in {"1", "true", "yes", "on"}


LIVE = _truthy(os.getenv("LEIVERIFY_LIVE_TESTS"))

SOCGEN_LEI = "529900W18LQJJN6SJ336"


# =============================================================================
# REGISTRY FIXTURE BUILDERS
# =============================================================================


def make_resource(
    lei: str = SOCGEN_LEI,
    name: str = "Société Générale Effekten GmbH",
    *,
    entity_status: str = "ACTIVE",
    registration_status: str = "ISSUED",
    corroboration: str = "FULLY_CORROBORATED",
    next_renewal: Optional[str] = None,
    country: str = "DE",
    jurisdiction: str = "DE",
    bic: Optional[List[str]] = None,
    other_names: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """One `lei-records` resource as GLEIF returns it."""
    address = {
        "addressLines": ["Neue Mainzer Straße 46-50"],
        "city": "Frankfurt am Main",
        "region": "DE-HE",
        "country": country,
        "postalCode": "60311",
    }
    attrs = {
        "lei": lei,
        "entity": {
            "legalName": {"name": name, "language": "de"},
            "otherNames": [{"name": n} for n in (other_names or [])],
            "legalAddress": address,
            "headquartersAddress": address,
            "jurisdiction": jurisdiction,
            "legalForm": {"id": "2HBR", "other": None},
            "status": entity_status,
            "expiration": {"date": None, "reason": None},
        },
        "registration": {
            "initialRegistrationDate": "2014-04-10T00:00:00Z",
            "lastUpdateDate": "2024-03-26T09:04:22Z",
            "status": registration_status,
            "nextRenewalDate": next_renewal,
            "managingLou": "529900W18LQJJN6SJ336",
            "corroborationLevel": corroboration,
        },
    }
    if bic is not None:
        attrs["bic"] = bic
    return {"type": "lei-records", "id": lei, "attributes": attrs}


def single(resource: Dict[str, Any]) -> Success:
    return Success(body={"data": resource})


def page(*resources: Dict[str, Any]) -> Success:
    return Success(
        body={
            "data": list(resources),
            "meta": {"pagination": {"total": len(resources)}},
        }
    )


# =============================================================================
# FAKES
# =============================================================================


class FakeTransport:
    """
    In-memory registry. `handler(path, query)` returns a TransportOutcome;
    every call is recorded (thread-safe) for later assertions.
    """

    def __init__(self, handler: Callable[[str, Dict[str, str]], Any]) -> None:
        self._handler = handler
        self._lock = threading.Lock()
        self.calls: List[Tuple[str, Dict[str, str]]] = []

    def fetch(self, path: str, query: Optional[Dict[str, str]] = None):
        q = dict(query or {})
        with self._lock:
            self.calls.append((path, q))
        return self._handler(path, q)

    def paths(self) -> List[str]:
        return [p for p, _ in self.calls]


class RecordStore:
    """Handler serving `/lei-records/<lei>` from a dict; 404 otherwise."""

    def __init__(self, *resources: Dict[str, Any]) -> None:
        self.by_lei = {r["id"]: r for r in resources}
        self.lists: Dict[Tuple[str, str], Any] = {}

    def add_list(self, key: str, value: str, outcome) -> None:
        self.lists[(key, value)] = outcome

    def __call__(self, path: str, query: Dict[str, str]):
        if path.startswith("/lei-records/"):
            lei = path.rsplit("/", 1)[-1]
            if lei in self.by_lei:
                return single(self.by_lei[lei])
            return NotFound(path=path)
        for k, v in query.items():
            if (k, v) in self.lists:
                return self.lists[(k, v)]
        return page()


class CountingLimiter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.acquired = 0

    def acquire(self) -> None:
        with self._lock:
            self.acquired += 1


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        base_url="https://registry.test/api/v1",
        batch_delay_s=0.0,
    )


@pytest.fixture
def limiter() -> CountingLimiter:
    return CountingLimiter()


@pytest.fixture
def live_client():
    """Live client; only created in LIVE mode."""
    if not LIVE:
        pytest.skip("live_client skipped (offline mode)")
    from leiverify.client import LEIClient

    return LEIClient()


# =============================================================================
# PYTEST MARKER HANDLING
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "live: test requires live API access")


def pytest_runtest_setup(item: pytest.Item) -> None:
    if "live" in item.keywords and not LIVE:
        pytest.skip("live test skipped (LEIVERIFY_LIVE_TESTS not enabled)")

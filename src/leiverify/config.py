"""
Global configuration for leiverify.
Only infrastructure knobs live here (base URL, quota, timeouts, batching).
Defaults come from the environment (.env honored); `ClientConfig` is the
injectable object every component reads from.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final, Optional

from dotenv import load_dotenv

load_dotenv()

# GLEIF caps page[size] at 200
MAX_PAGE_SIZE: Final[int] = 200

# -----------------------------------------------------------------------------
# Registry endpoint
# -----------------------------------------------------------------------------
GLEIF_BASE_URL: Final[str] = os.getenv(
    "LEIVERIFY_BASE_URL", "https://api.gleif.org/api/v1"
)
USER_AGENT: Final[str] = os.getenv("LEIVERIFY_USER_AGENT", "leiverify/0.1")

# -----------------------------------------------------------------------------
# HTTP / retry / pacing
# -----------------------------------------------------------------------------
DEFAULT_TIMEOUT_S: Final[float] = float(os.getenv("LEIVERIFY_TIMEOUT_S", "30"))
DEFAULT_RETRIES: Final[int] = int(os.getenv("LEIVERIFY_RETRIES", "0"))
RETRY_BACKOFF_FACTOR: Final[float] = float(
    os.getenv("LEIVERIFY_RETRY_BACKOFF", "0.8")
)
RETRY_STATUS_FORCELIST: Final[list[int]] = [429, 500, 502, 503, 504]

# GLEIF allows 60 requests per minute per user
DEFAULT_RATE_LIMIT: Final[int] = int(os.getenv("LEIVERIFY_RATE_LIMIT", "60"))
DEFAULT_WINDOW_S: Final[float] = float(os.getenv("LEIVERIFY_WINDOW_S", "60"))

# -----------------------------------------------------------------------------
# Batching / search shaping
# -----------------------------------------------------------------------------
DEFAULT_BATCH_SIZE: Final[int] = int(os.getenv("LEIVERIFY_BATCH_SIZE", "10"))
DEFAULT_BATCH_DELAY_S: Final[float] = float(
    os.getenv("LEIVERIFY_BATCH_DELAY_S", "1.0")
)
DEFAULT_MAX_CHILDREN: Final[int] = int(os.getenv("LEIVERIFY_MAX_CHILDREN", "10"))
DEFAULT_MAX_PARENT_DEPTH: Final[int] = int(
    os.getenv("LEIVERIFY_MAX_PARENT_DEPTH", "10")
)
DEFAULT_FUZZY_LIMIT: Final[int] = int(os.getenv("LEIVERIFY_FUZZY_LIMIT", "10"))
DEFAULT_SEARCH_LIMIT: Final[int] = int(os.getenv("LEIVERIFY_SEARCH_LIMIT", "10"))
DEFAULT_COUNTRY_LIMIT: Final[int] = int(
    os.getenv("LEIVERIFY_COUNTRY_LIMIT", "50")
)


def get_env(
    name: str, *, required: bool = False, default: Optional[str] = None
) -> Optional[str]:
    """Small helper to fetch env vars with an optional 'required' flag."""
    val = os.getenv(name, default)
    if required and not val:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return val


def clamp_page_size(n: int) -> int:
    return max(1, min(MAX_PAGE_SIZE, int(n)))


@dataclass(frozen=True)
class ClientConfig:
    """
    Every tunable of the client in one place. Field defaults mirror the
    module-level constants above, so a bare `ClientConfig()` follows the
    environment.

    Raises ValueError on construction if a knob is out of range.
    """

    base_url: str = GLEIF_BASE_URL
    rate_limit: int = DEFAULT_RATE_LIMIT
    window_s: float = DEFAULT_WINDOW_S
    timeout_s: float = DEFAULT_TIMEOUT_S
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay_s: float = DEFAULT_BATCH_DELAY_S
    max_children: int = DEFAULT_MAX_CHILDREN
    max_parent_depth: int = DEFAULT_MAX_PARENT_DEPTH
    fuzzy_limit: int = DEFAULT_FUZZY_LIMIT
    search_limit: int = DEFAULT_SEARCH_LIMIT
    country_limit: int = DEFAULT_COUNTRY_LIMIT
    retries: int = DEFAULT_RETRIES
    user_agent: str = USER_AGENT
    debug: bool = False

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be http(s): {self.base_url!r}")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

        positive = {
            "rate_limit": self.rate_limit,
            "window_s": self.window_s,
            "timeout_s": self.timeout_s,
            "batch_size": self.batch_size,
            "max_children": self.max_children,
            "fuzzy_limit": self.fuzzy_limit,
            "search_limit": self.search_limit,
            "country_limit": self.country_limit,
        }
        for name, val in positive.items():
            if val <= 0:
                raise ValueError(f"{name} must be > 0, got {val!r}")

        non_negative = {
            "batch_delay_s": self.batch_delay_s,
            "max_parent_depth": self.max_parent_depth,
            "retries": self.retries,
        }
        for name, val in non_negative.items():
            if val < 0:
                raise ValueError(f"{name} must be >= 0, got {val!r}")

    @classmethod
    def with_rpm(cls, rpm: int, **overrides) -> "ClientConfig":
        """Requests-per-minute shorthand used by the CLI."""
        return cls(rate_limit=int(rpm), window_s=60.0, **overrides)


# -----------------------------------------------------------------------------
# Public exports
# -----------------------------------------------------------------------------
__all__ = [
    "MAX_PAGE_SIZE",
    # endpoint
    "GLEIF_BASE_URL",
    "USER_AGENT",
    # http/retry/pacing
    "DEFAULT_TIMEOUT_S",
    "DEFAULT_RETRIES",
    "RETRY_BACKOFF_FACTOR",
    "RETRY_STATUS_FORCELIST",
    "DEFAULT_RATE_LIMIT",
    "DEFAULT_WINDOW_S",
    # batching/search
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_BATCH_DELAY_S",
    "DEFAULT_MAX_CHILDREN",
    "DEFAULT_MAX_PARENT_DEPTH",
    "DEFAULT_FUZZY_LIMIT",
    "DEFAULT_SEARCH_LIMIT",
    "DEFAULT_COUNTRY_LIMIT",
    # helpers
    "get_env",
    "clamp_page_size",
    "ClientConfig",
]

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..core.contracts import (
    CorroborationLevel,
    EntityStatus,
    RegistrationStatus,
    RegistryRecord,
)

# ---------- penalties ----------
PENALTY = {
    "entity_not_active": 0.3,
    "registration_lapsed": 0.4,
    "registration_other": 0.2,  # anything but ISSUED / LAPSED
    "partially_corroborated": 0.1,
    "pending_corroboration": 0.2,
    "renewal_overdue": 0.2,
}
RENEWAL_NOTICE_DAYS = 30
_DAY_S = 24 * 60 * 60


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """ISO-8601 string -> aware datetime (naive values are taken as UTC)."""
    if not value:
        return None
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def score(
    record: RegistryRecord, now: Optional[datetime] = None
) -> Tuple[float, List[str]]:
    """
    Return (confidence, warnings) for a record. Confidence starts at 1.0,
    every matching condition subtracts its penalty, floor at 0.0.

    `now` pins the renewal checks; it defaults to the current UTC time.
    """
    now = now or datetime.now(timezone.utc)
    confidence = 1.0
    warnings: List[str] = []

    entity_status = record.entity_status
    if entity_status != EntityStatus.ACTIVE:
        confidence -= PENALTY["entity_not_active"]
        warnings.append(f"Entity status is {entity_status}")

    reg = record.registration
    if reg.status == RegistrationStatus.LAPSED:
        confidence -= PENALTY["registration_lapsed"]
        warnings.append("LEI registration has lapsed")
    elif reg.status != RegistrationStatus.ISSUED:
        confidence -= PENALTY["registration_other"]
        warnings.append(f"Registration status is {reg.status}")

    level = reg.corroboration_level
    if level == CorroborationLevel.PARTIALLY_CORROBORATED:
        confidence -= PENALTY["partially_corroborated"]
    elif level == CorroborationLevel.PENDING_CORROBORATION:
        confidence -= PENALTY["pending_corroboration"]
    if level and level != CorroborationLevel.FULLY_CORROBORATED:
        warnings.append(f"Corroboration level is {level}")

    renewal = parse_timestamp(reg.next_renewal_date)
    if renewal is not None:
        if now > renewal:
            confidence -= PENALTY["renewal_overdue"]
            warnings.append("LEI renewal is overdue")
        else:
            days = math.ceil((renewal - now).total_seconds() / _DAY_S)
            if days <= RENEWAL_NOTICE_DAYS:
                warnings.append(f"LEI renewal due in {days} days")

    # rounding keeps 1.0 - 0.3 - 0.2 from printing as 0.49999999999999994
    return round(max(0.0, confidence), 6), warnings

"""
Defensive parsing of GLEIF JSON:API envelopes.

Shapes handled:
  single record   {"data": {"type": "lei-records", "id": LEI, "attributes": {...}}}
  record list     {"data": [ {...}, ... ], "meta": {"pagination": {...}}}
  completions     {"data": [ {"attributes": {"lei"|"value"|"match", "score"},
                              "relationships": {"lei-records": {"data": {"id"}}}} ]}

Anything else raises MalformedRecord.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from ..core.contracts import Address, FuzzyMatch, Registration, RegistryRecord


class MalformedRecord(ValueError):
    """The registry returned a body that does not fit the expected shape."""


def as_legal_name(obj: Any) -> str:
    if isinstance(obj, dict):
        return str(obj.get("name", "") or "").strip()
    if isinstance(obj, str):
        return obj.strip()
    return ""


def as_other_names(arr: Any) -> List[str]:
    out: List[str] = []
    if isinstance(arr, list):
        for x in arr:
            nm = _str(x.get("name")) if isinstance(x, dict) else _str(x)
            if nm:
                out.append(nm)
    return out


def _str(v: Any) -> str:
    return "" if v is None else str(v).strip()


def _opt(v: Any) -> Optional[str]:
    s = _str(v)
    return s or None


def _as_dict(v: Any, what: str) -> Dict[str, Any]:
    if not isinstance(v, dict):
        raise MalformedRecord(f"{what} must be an object, got {type(v).__name__}")
    return v


def as_address(obj: Any) -> Address:
    if not isinstance(obj, dict):
        return Address()
    lines = obj.get("addressLines") or []
    return Address(
        lines=[_str(x) for x in lines if _str(x)] if isinstance(lines, list) else [],
        city=_str(obj.get("city")),
        region=_str(obj.get("region")),
        country=_str(obj.get("country")).upper(),
        postal_code=_str(obj.get("postalCode")),
    )


def _legal_form(obj: Any) -> str:
    if isinstance(obj, dict):
        return _str(obj.get("id")) or _str(obj.get("other"))
    return _str(obj)


def parse_attributes(attr: Any, fallback_lei: str = "") -> RegistryRecord:
    """Build a RegistryRecord from the `attributes` object of one resource."""
    attr = _as_dict(attr, "attributes")
    ent = _as_dict(attr.get("entity"), "attributes.entity")
    reg = _as_dict(attr.get("registration"), "attributes.registration")

    lei = _str(attr.get("lei")) or _str(fallback_lei)
    if not lei:
        raise MalformedRecord("record has no LEI")
    legal = as_legal_name(ent.get("legalName"))
    if not legal:
        raise MalformedRecord(f"record {lei} has no legal name")

    expiration = ent.get("expiration") or {}
    if not isinstance(expiration, dict):
        expiration = {}
    bic = attr.get("bic") or []

    return RegistryRecord(
        lei=lei,
        legal_name=legal,
        entity_status=_str(ent.get("status")).upper(),
        registration=Registration(
            status=_str(reg.get("status")).upper(),
            initial_registration_date=_str(reg.get("initialRegistrationDate")),
            last_update_date=_str(reg.get("lastUpdateDate")),
            next_renewal_date=_opt(reg.get("nextRenewalDate")),
            managing_lou=_str(reg.get("managingLou")),
            corroboration_level=_str(reg.get("corroborationLevel")).upper(),
        ),
        other_names=as_other_names(ent.get("otherNames")),
        legal_address=as_address(ent.get("legalAddress")),
        headquarters_address=as_address(ent.get("headquartersAddress")),
        jurisdiction=_str(ent.get("jurisdiction")),
        legal_form=_legal_form(ent.get("legalForm")),
        expiration_date=_opt(expiration.get("date")),
        expiration_reason=_opt(expiration.get("reason")),
        bic=[_str(b) for b in bic if _str(b)] if isinstance(bic, list) else [],
    )


def _parse_resource(d: Any) -> RegistryRecord:
    d = _as_dict(d, "resource")
    try:
        return parse_attributes(d.get("attributes"), fallback_lei=_str(d.get("id")))
    except (AttributeError, TypeError) as e:
        # nested value of an unexpected type
        raise MalformedRecord(f"unexpected field shape: {e}") from e


def parse_record(body: Any) -> RegistryRecord:
    """Single-record envelope -> RegistryRecord."""
    body = _as_dict(body, "body")
    return _parse_resource(body.get("data"))


def parse_record_list(body: Any) -> Tuple[List[RegistryRecord], int]:
    """
    Record-list envelope -> (records, skipped). Individual resources that do
    not parse are skipped and counted rather than failing the whole page.
    """
    body = _as_dict(body, "body")
    data = body.get("data")
    if data is None:
        return [], 0
    if not isinstance(data, list):
        raise MalformedRecord("data must be a list")
    out: List[RegistryRecord] = []
    skipped = 0
    for d in data:
        try:
            out.append(_parse_resource(d))
        except MalformedRecord:
            skipped += 1
    return out, skipped


def resource_ids(body: Any) -> List[str]:
    """LEIs of every resource in a record-list envelope, in order."""
    body = _as_dict(body, "body")
    data = body.get("data") or []
    if not isinstance(data, list):
        raise MalformedRecord("data must be a list")
    out: List[str] = []
    for d in data:
        if not isinstance(d, dict):
            continue
        attr = d.get("attributes")
        lei = _str(d.get("id"))
        if not lei and isinstance(attr, dict):
            lei = _str(attr.get("lei"))
        if lei:
            out.append(lei)
    return out


def _completion_lei(d: Dict[str, Any], attr: Dict[str, Any]) -> str:
    lei = _str(attr.get("lei"))
    if lei:
        return lei
    rels = d.get("relationships")
    rel = rels.get("lei-records") if isinstance(rels, dict) else None
    rel_data = rel.get("data") if isinstance(rel, dict) else None
    if isinstance(rel_data, dict):
        return _str(rel_data.get("id"))
    return ""


def parse_fuzzy(body: Any) -> List[FuzzyMatch]:
    """Fuzzy-completion envelope -> ranked FuzzyMatch list (registry order)."""
    body = _as_dict(body, "body")
    data = body.get("data") or []
    if not isinstance(data, list):
        raise MalformedRecord("data must be a list")
    out: List[FuzzyMatch] = []
    for d in data:
        if not isinstance(d, dict):
            continue
        attr = d.get("attributes") or {}
        if not isinstance(attr, dict):
            continue
        lei = _completion_lei(d, attr)
        if not lei:
            continue
        score = attr.get("score")
        try:
            score = float(score) if score is not None else None
        except (TypeError, ValueError):
            score = None
        out.append(
            FuzzyMatch(
                lei=lei,
                match=_str(attr.get("match") or attr.get("value")),
                score=score,
            )
        )
    return out


def pretty_record(rec: RegistryRecord) -> str:
    sample = {
        "lei": rec.lei,
        "legalName": rec.legal_name,
        "otherNames": rec.other_names,
        "jurisdiction": rec.jurisdiction,
        "hq": rec.headquarters_address.country,
    }
    return json.dumps(sample, ensure_ascii=False)[:600]

"""
GLEIF (Global Legal Entity Identifier Foundation) registry client pieces.

This subpackage provides:
- HTTP session + typed transport outcomes (`http.py`)
- Structured parsing of GLEIF API responses (`parse.py`)
- Shared request quota (`ratelimit.py`)
- Confidence/warning heuristic (`scoring.py`)
- Single-LEI validation (`validate.py`)
- Exact, fuzzy and country search (`search.py`)
- BIC lookup (`bic.py`)
- Parent/child ownership (`relationships.py`)
- Chunked batch validation (`batch.py`)

Typical usage goes through the façade instead:
    from leiverify.client import LEIClient
"""

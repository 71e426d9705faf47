from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

import typer

from .client import LEIClient
from .config import DEFAULT_RATE_LIMIT, DEFAULT_TIMEOUT_S, ClientConfig
from .gleif.http import RegistryTransport, Success, smoke_test

app = typer.Typer(help="leiverify: validate and explore GLEIF LEI records")


def _client(rpm: int, timeout: float, debug: bool) -> LEIClient:
    return LEIClient(ClientConfig.with_rpm(rpm, timeout_s=timeout, debug=debug))


def _echo(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False))


RPM = typer.Option(DEFAULT_RATE_LIMIT, help="Requests per minute quota")
TIMEOUT = typer.Option(DEFAULT_TIMEOUT_S, help="Per-request timeout (seconds)")
DEBUG = typer.Option(False, help="Verbose registry diagnostics on stderr")


@app.command("validate")
def validate(
    lei: str = typer.Argument(..., help="20-character LEI"),
    rpm: int = RPM,
    timeout: float = TIMEOUT,
    debug: bool = DEBUG,
):
    """Validate one LEI and print the scored result."""
    res = _client(rpm, timeout, debug).validate(lei)
    _echo(res.to_dict())
    if not res.valid:
        raise typer.Exit(code=1)


@app.command("search")
def search(
    name: str = typer.Argument(..., help="Exact legal name"),
    limit: int = typer.Option(10, help="Max records to return"),
    rpm: int = RPM,
    timeout: float = TIMEOUT,
    debug: bool = DEBUG,
):
    """Exact legal-name search."""
    res = _client(rpm, timeout, debug).search_by_exact_name(name, limit)
    _echo([r.to_dict() for r in res])


@app.command("fuzzy")
def fuzzy(
    name: str = typer.Argument(..., help="Approximate organization name"),
    limit: int = typer.Option(10, help="Max matches to resolve"),
    rpm: int = RPM,
    timeout: float = TIMEOUT,
    debug: bool = DEBUG,
):
    """Fuzzy name search; confidence is capped by the match score."""
    res = _client(rpm, timeout, debug).search_by_name(name, limit)
    _echo([r.to_dict() for r in res])


@app.command("country")
def country(
    code: str = typer.Argument(..., help="ISO 3166 alpha-2 country code"),
    limit: int = typer.Option(50, help="Max records to return"),
    rpm: int = RPM,
    timeout: float = TIMEOUT,
    debug: bool = DEBUG,
):
    """Records whose legal address is in the given country."""
    res = _client(rpm, timeout, debug).search_by_country(code, limit)
    _echo([r.to_dict() for r in res])


@app.command("bic")
def bic(
    code: str = typer.Argument(..., help="BIC / SWIFT code"),
    rpm: int = RPM,
    timeout: float = TIMEOUT,
    debug: bool = DEBUG,
):
    res = _client(rpm, timeout, debug).find_by_bic(code)
    _echo(res.to_dict() if res else None)
    if res is None:
        raise typer.Exit(code=1)


@app.command("relationships")
def relationships(
    lei: str = typer.Argument(..., help="20-character LEI"),
    rpm: int = RPM,
    timeout: float = TIMEOUT,
    debug: bool = DEBUG,
):
    """Direct parent, ultimate parent and direct children of an LEI."""
    res = _client(rpm, timeout, debug).get_relationships(lei)
    _echo(res.to_dict())


@app.command("batch")
def batch(
    leis: Optional[List[str]] = typer.Argument(None, help="LEIs to validate"),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Text file with one LEI per line"
    ),
    summary: bool = typer.Option(
        False, help="Print one tab-separated line per LEI instead of JSON"
    ),
    rpm: int = RPM,
    timeout: float = TIMEOUT,
    debug: bool = DEBUG,
):
    """Validate many LEIs in rate-limited chunks."""
    ids = list(leis or [])
    if file is not None:
        lines = file.read_text(encoding="utf-8").splitlines()
        ids.extend(ln.strip() for ln in lines if ln.strip())
    if not ids:
        raise typer.BadParameter("no LEIs given")
    res = _client(rpm, timeout, debug).validate_batch(ids)
    if summary:
        for lei, r in res.items():
            typer.echo(f"{lei}\t{r.status}\t{r.confidence:.2f}\t{r.entity_name}")
        return None
    _echo({lei: r.to_dict() for lei, r in res.items()})
    return None


@app.command("smoke")
def smoke(timeout: float = TIMEOUT):
    """One cheap request to check the registry is reachable."""
    outcome = smoke_test(RegistryTransport(ClientConfig(timeout_s=timeout)))
    if not isinstance(outcome, Success):
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    app()

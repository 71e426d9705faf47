import json

from typer.testing import CliRunner

from conftest import SOCGEN_LEI, FakeTransport, RecordStore, make_resource, page
from leiverify import cli
from leiverify.client import LEIClient
from leiverify.config import ClientConfig

runner = CliRunner()


def _patch_client(monkeypatch, store):
    seen = {}

    def fake_client(rpm, timeout, debug):
        seen.update(rpm=rpm, timeout=timeout, debug=debug)
        cfg = ClientConfig.with_rpm(rpm, timeout_s=timeout, batch_delay_s=0.0)
        return LEIClient(cfg, transport=FakeTransport(store))

    monkeypatch.setattr(cli, "_client", fake_client)
    return seen


def test_validate_prints_json(monkeypatch):
    seen = _patch_client(monkeypatch, RecordStore(make_resource()))
    r = runner.invoke(cli.app, ["validate", SOCGEN_LEI, "--rpm", "30"])
    assert r.exit_code == 0, r.output
    out = json.loads(r.output)
    assert out["valid"] is True
    assert out["lei"] == SOCGEN_LEI
    assert out["confidence"] == 1.0
    assert seen["rpm"] == 30


def test_validate_not_found_exit_code(monkeypatch):
    _patch_client(monkeypatch, RecordStore())
    r = runner.invoke(cli.app, ["validate", "INVALID1234567890XX"])
    assert r.exit_code == 1
    assert json.loads(r.output)["status"] == "NOT_FOUND"


def test_bic_missing(monkeypatch):
    _patch_client(monkeypatch, RecordStore())
    r = runner.invoke(cli.app, ["bic", "NONEXXXX"])
    assert r.exit_code == 1
    assert r.output.strip() == "null"


def test_country(monkeypatch):
    store = RecordStore()
    store.add_list("filter[entity.legalAddress.country]", "DE", page(make_resource()))
    _patch_client(monkeypatch, store)
    r = runner.invoke(cli.app, ["country", "de", "--limit", "5"])
    assert r.exit_code == 0, r.output
    assert [x["lei"] for x in json.loads(r.output)] == [SOCGEN_LEI]


def test_batch_summary_from_file(monkeypatch, tmp_path):
    _patch_client(monkeypatch, RecordStore(make_resource()))
    f = tmp_path / "leis.txt"
    f.write_text(f"{SOCGEN_LEI}\nINVALID1234567890XX\n\n", encoding="utf-8")
    r = runner.invoke(cli.app, ["batch", "--file", str(f), "--summary"])
    assert r.exit_code == 0, r.output
    lines = sorted(r.output.strip().splitlines())
    assert lines[0].startswith(f"{SOCGEN_LEI}\tACTIVE\t1.00")
    assert lines[1].startswith("INVALID1234567890XX\tNOT_FOUND\t0.00")


def test_batch_requires_input(monkeypatch):
    _patch_client(monkeypatch, RecordStore())
    r = runner.invoke(cli.app, ["batch"])
    assert r.exit_code != 0

"""Tests for the command line entry point."""

from unittest.mock import MagicMock, patch

import pytest

import run
from brew_invoice.models import CatalogEntry


@pytest.fixture
def no_credentials(monkeypatch):
    monkeypatch.delenv("BREWFATHER_USER_ID", raising=False)
    monkeypatch.delenv("BREWFATHER_API_KEY", raising=False)


def test_extract_writes_reports(tmp_path, invoice_text, capsys):
    input_dir = tmp_path / "in"
    input_dir.mkdir()
    (input_dir / "invoice.pdf").write_bytes(b"%PDF-1.4")
    out = tmp_path / "out"

    with patch("brew_invoice.pipeline.extract_text_from_pdf", return_value=invoice_text):
        code = run.main(["extract", "--input", str(input_dir), "--output", str(out)])

    assert code == 0
    assert "Processed 1 invoice(s)" in capsys.readouterr().out
    assert len(list(out.glob("brewfather-inventory-*.csv"))) == 1


def test_extract_creates_missing_input(tmp_path, capsys):
    code = run.main(["extract", "--input", str(tmp_path / "new"), "--output", str(tmp_path / "out")])
    assert code == 0
    assert (tmp_path / "new").is_dir()
    assert "Created input directory" in capsys.readouterr().out


def test_test_command_without_credentials(no_credentials, capsys):
    assert run.main(["test"]) == 1
    assert "User ID and API Key are required" in capsys.readouterr().err


def test_list_command(monkeypatch, capsys):
    monkeypatch.setenv("BREWFATHER_USER_ID", "u")
    monkeypatch.setenv("BREWFATHER_API_KEY", "k")
    client = MagicMock()
    client.get_inventory.side_effect = lambda category: (
        [CatalogEntry(id="1", name="Maris Otter", current_amount=5.0, unit="kg")] if category == "fermentable" else []
    )
    with patch.object(run, "_client", return_value=client):
        assert run.main(["list"]) == 0

    out = capsys.readouterr().out
    assert "FERMENTABLES (1 items):" in out
    assert "Stock: 5.0 kg" in out
    assert "HOPS (0 items):" in out


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        run.main(["frobnicate"])

"""Unit tests for proof file reading and writing."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from zkv_router.config import DEFAULT_FALLBACK_VK
from zkv_router.exceptions import EncodingError, InvalidHexError, MissingFieldError
from zkv_router.proof.storage import load_proof, parse_proof_json, save_proof
from zkv_router.types import CanonicalProof

VK = "0x" + "11" * 32


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_reads_current_pubs_field(tmp_path: Path) -> None:
    path = _write(tmp_path / "proof.json", {"proof": "0xAABB", "pubs": "0x01", "vk": VK})
    proof = load_proof(path)
    assert proof == CanonicalProof(proof="0xaabb", public_inputs="0x01", verification_key=VK)


def test_reads_legacy_pub_inputs_field() -> None:
    proof = parse_proof_json({"proof": "0x00", "pub_inputs": "0x0203", "vk": VK})
    assert proof.public_inputs == "0x0203"


def test_pubs_takes_precedence_over_pub_inputs() -> None:
    proof = parse_proof_json(
        {"proof": "0x00", "pub_inputs": "0xdead", "pubs": "0xbeef", "vk": VK}
    )
    assert proof.public_inputs == "0xbeef"


def test_missing_proof_is_named() -> None:
    with pytest.raises(MissingFieldError) as excinfo:
        parse_proof_json({"pubs": "0x01", "vk": VK})
    assert excinfo.value.field == "proof"


def test_missing_both_public_input_aliases_is_named() -> None:
    with pytest.raises(MissingFieldError) as excinfo:
        parse_proof_json({"proof": "0x01", "vk": VK})
    assert "pubs" in excinfo.value.field
    assert "pub_inputs" in excinfo.value.field


def test_missing_vk_falls_back_to_default_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        proof = parse_proof_json({"proof": "0x01", "pubs": "0x02"})
    assert proof.verification_key == "0x" + DEFAULT_FALLBACK_VK
    assert "falling back to default VK" in caplog.text


def test_double_encoded_vk_is_canonicalized() -> None:
    double = "0x" + VK.encode("ascii").hex()
    proof = parse_proof_json({"proof": "0x01", "pubs": "0x02", "vk": double})
    assert proof.verification_key == VK


def test_bad_hex_is_named() -> None:
    with pytest.raises(InvalidHexError) as excinfo:
        parse_proof_json({"proof": "0xzz", "pubs": "0x02", "vk": VK})
    assert excinfo.value.field == "proof"


def test_non_object_and_bad_json(tmp_path: Path) -> None:
    with pytest.raises(EncodingError):
        parse_proof_json(["not", "an", "object"])
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    with pytest.raises(EncodingError, match="not valid JSON"):
        load_proof(bad)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(EncodingError, match="cannot read"):
        load_proof(tmp_path / "absent.json")


def test_save_writes_current_layout_and_reloads(tmp_path: Path) -> None:
    proof = CanonicalProof(proof="0x0a0b", public_inputs="0x0c", verification_key=VK)
    path = save_proof(proof, tmp_path / "out" / "proof.json")

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "proof": "0x0a0b",
        "pubs": "0x0c",
        "vk": VK,
    }
    assert load_proof(path) == proof
    assert [p.name for p in path.parent.iterdir()] == ["proof.json"]


@pytest.mark.parametrize("field", ["proof", "pubs"])
def test_embedded_whitespace_in_hex_field_is_rejected(field: str) -> None:
    data = {"proof": "0x01", "pubs": "0x02", "vk": VK}
    data[field] = "0xab cd"
    with pytest.raises(InvalidHexError) as excinfo:
        parse_proof_json(data)
    assert excinfo.value.field == field

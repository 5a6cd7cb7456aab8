"""Proof file reading and writing.

Files are JSON objects with "proof", "pubs" and "vk" hex fields. Older files
use "pub_inputs" instead of "pubs"; readers accept both and prefer "pubs".
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

from ..config import DEFAULT_FALLBACK_VK
from ..exceptions import EncodingError, InvalidHexError, MissingFieldError
from ..log import get_logger
from ..types import CanonicalProof, from_hex, to_hex
from .keys import canonical_key_hex

PUBS_FIELDS = ("pubs", "pub_inputs")


def proof_to_json(proof: CanonicalProof) -> dict[str, str]:
    return {
        "proof": proof.proof,
        "pubs": proof.public_inputs,
        "vk": proof.verification_key,
    }


def _hex_field(data: Mapping[str, Any], field: str) -> str:
    value = data[field]
    if not isinstance(value, str):
        raise InvalidHexError(field, "must be a hex string")
    return to_hex(from_hex(value, field))


def parse_proof_json(
    data: Any,
    default_vk: str = DEFAULT_FALLBACK_VK,
    logger: Optional[logging.Logger] = None,
) -> CanonicalProof:
    log = get_logger(__name__, logger)
    if not isinstance(data, dict):
        raise EncodingError("proof_file", "must be a JSON object")
    log.debug("Available fields in proof JSON: %s", sorted(data))

    if "proof" not in data:
        raise MissingFieldError("proof")
    proof_hex = _hex_field(data, "proof")

    pubs_field = next((name for name in PUBS_FIELDS if name in data), None)
    if pubs_field is None:
        raise MissingFieldError("pubs/pub_inputs")
    pubs_hex = _hex_field(data, pubs_field)
    log.debug("Using field '%s' for public inputs, length: %d chars", pubs_field, len(pubs_hex))

    raw_vk = data.get("vk")
    if raw_vk is None:
        log.warning("Proof file has no 'vk' field; falling back to default VK %s", default_vk)
        raw_vk = default_vk
    elif not isinstance(raw_vk, str):
        raise InvalidHexError("vk", "must be a hex string")

    return CanonicalProof(
        proof=proof_hex,
        public_inputs=pubs_hex,
        verification_key=canonical_key_hex(raw_vk),
    )


def load_proof(
    path: Path | str,
    default_vk: str = DEFAULT_FALLBACK_VK,
    logger: Optional[logging.Logger] = None,
) -> CanonicalProof:
    log = get_logger(__name__, logger)
    path = Path(path)
    log.info("Reading proof file from: %s", path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise EncodingError("proof_file", f"cannot read {path}: {exc}") from exc
    log.debug("Proof file size: %d bytes", len(raw))
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise EncodingError("proof_file", f"{path} is not valid JSON") from exc
    return parse_proof_json(data, default_vk=default_vk, logger=logger)


def write_json_atomic(payload: Any, path: Path | str) -> Path:
    """Write JSON next to `path` and rename it into place."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
            fh.write("\n")
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def save_proof(proof: CanonicalProof, path: Path | str) -> Path:
    return write_json_atomic(proof_to_json(proof), path)

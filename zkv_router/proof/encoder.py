"""Conversion of raw proof artifacts into canonical proof records."""

from __future__ import annotations

import logging
import struct
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

from ..config import RouterConfig
from ..exceptions import EncodingError, InvalidHexError, ShrinkError
from ..log import get_logger
from ..types import CanonicalProof
from .keys import KEY_BYTES, canonicalize_key, is_double_encoded

PLACEHOLDER_PUBS_BYTES = 32


class ProofShrinker(Protocol):
    """Proving-system collaborator: artifact -> (shrunk proof, public inputs)."""

    def shrink(self, artifact: bytes) -> tuple[bytes, bytes]:
        ...


class ExternalShrinker:
    """Run an external shrink binary over the artifact in a scratch directory."""

    def __init__(self, binary: str) -> None:
        self._binary = binary

    def command(self, artifact_path: Path, proof_path: Path, pubs_path: Path) -> list[str]:
        return [
            self._binary,
            "--artifact",
            str(artifact_path),
            "--proof-out",
            str(proof_path),
            "--pubs-out",
            str(pubs_path),
        ]

    def shrink(self, artifact: bytes) -> tuple[bytes, bytes]:
        with tempfile.TemporaryDirectory() as tmp_dir:
            base = Path(tmp_dir)
            artifact_path = base / "artifact.bin"
            proof_path = base / "proof.bin"
            pubs_path = base / "pubs.bin"
            artifact_path.write_bytes(artifact)
            try:
                result = subprocess.run(
                    self.command(artifact_path, proof_path, pubs_path),
                    capture_output=True,
                    text=True,
                    check=False,
                )
            except FileNotFoundError as exc:
                raise ShrinkError(f"missing shrinker binary: {self._binary}") from exc
            if result.returncode != 0:
                stderr = result.stderr.strip() or "unknown shrinker error"
                raise ShrinkError(f"shrinker failed: {stderr}")
            if not proof_path.exists() or not pubs_path.exists():
                raise ShrinkError("shrinker produced no proof/pubs output")
            return proof_path.read_bytes(), pubs_path.read_bytes()


class PlaceholderShrinker:
    """Stand-in conversion: length-prefixed artifact as proof, zeroed public inputs.

    The proof is the artifact in bincode's legacy `Vec<u8>` layout (u64
    little-endian length, then the bytes). Records produced this way will
    not verify on chain.
    """

    def shrink(self, artifact: bytes) -> tuple[bytes, bytes]:
        proof = struct.pack("<Q", len(artifact)) + bytes(artifact)
        return proof, bytes(PLACEHOLDER_PUBS_BYTES)


def make_shrinker(config: RouterConfig) -> ProofShrinker:
    if config.prove_mode == "placeholder":
        return PlaceholderShrinker()
    return ExternalShrinker(config.shrinker_binary)


class ProofEncoder:
    def __init__(
        self, shrinker: ProofShrinker, logger: Optional[logging.Logger] = None
    ) -> None:
        self._shrinker = shrinker
        self._log = get_logger(__name__, logger)

    def canonicalize_key(self, raw: Union[str, bytes]) -> bytes:
        if isinstance(raw, str):
            path = "double" if is_double_encoded(raw) else "single"
            self._log.debug("VK appears to be %s-encoded (%d chars)", path, len(raw))
        key = canonicalize_key(raw)
        self._log.debug("Canonical VK: 0x%s", key.hex())
        return key

    def convert(self, artifact: bytes, key: bytes) -> CanonicalProof:
        if not artifact:
            raise EncodingError("artifact", "artifact is empty")
        if len(key) != KEY_BYTES:
            raise InvalidHexError("vk", f"expected {KEY_BYTES} key bytes, got {len(key)}")
        self._log.info("Converting proof to zkVerify format...")
        proof, pubs = self._shrinker.shrink(bytes(artifact))
        self._log.debug("Proof bytes: %d, public input bytes: %d", len(proof), len(pubs))
        return CanonicalProof.from_bytes(proof, pubs, key)

    def encode(self, artifact: bytes, raw_key: Union[str, bytes]) -> CanonicalProof:
        return self.convert(artifact, self.canonicalize_key(raw_key))
